"""Convenience front end for the first-passage time solvers.

The solvers in `ddm_fpt.solvers` and `ddm_fpt.closed_form` work on caller-owned
buffers and exact step counts. The helpers here take a time horizon `t_max`
instead, accept scalars or schedules of any length (shorter schedules are
extended with their last element, derivative schedules with zeros), estimate
missing boundary derivatives, allocate the outputs and return an `FPTDensity`.
Allocation failure is raised as MemoryError.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .closed_form import asym_bound_density, const_bound_density
from .numerics import bound_derivative, extend_vector, mass_normalize
from .scratch import SolverStatus
from .solvers import (
    solve_fpt,
    solve_fpt_const_mu,
    solve_fpt_leak,
    solve_fpt_sym_bound,
    solve_fpt_weighted,
)


@dataclass(frozen=True, slots=True)
class FPTDensity:
    """Upper (g1) and lower (g2) boundary densities on t_k = (k + 1) * delta_t."""

    g1: np.ndarray
    g2: np.ndarray
    delta_t: float

    def __post_init__(self) -> None:
        if self.g1.shape != self.g2.shape:
            raise ValueError("g1 and g2 must have the same shape")
        if not float(self.delta_t) > 0.0:
            raise ValueError("delta_t must be > 0")

    @property
    def t(self) -> np.ndarray:
        return self.delta_t * np.arange(1, self.g1.size + 1, dtype=float)

    @property
    def p_upper(self) -> float:
        return float(np.sum(self.g1) * self.delta_t)

    @property
    def p_lower(self) -> float:
        return float(np.sum(self.g2) * self.delta_t)

    @property
    def mass(self) -> float:
        """Total probability of a boundary hit before t_max (approximately 1)."""
        return self.p_upper + self.p_lower

    def normalized(self) -> "FPTDensity":
        """Copy whose total mass is exactly one; see `mass_normalize`."""
        g1 = self.g1.copy()
        g2 = self.g2.copy()
        mass_normalize(g1, g2, self.delta_t)
        return FPTDensity(g1, g2, self.delta_t)


def _steps(delta_t: float, t_max: float) -> int:
    delta_t = float(delta_t)
    t_max = float(t_max)
    if not delta_t > 0.0:
        raise ValueError("delta_t must be > 0")
    if not t_max >= delta_t:
        raise ValueError("t_max must be >= delta_t")
    # tolerate round-off in t_max / delta_t, e.g. 3.0 / 0.01
    return int(math.ceil(t_max / delta_t - 1e-9))


def _schedule(name: str, values, k_max: int, fill: float | None = None) -> np.ndarray:
    arr = np.asarray(values, dtype=float).reshape((-1,))
    if arr.size == 0:
        raise ValueError(f"{name} must not be empty")
    if fill is None:
        fill = float(arr[-1])
    out = extend_vector(arr, k_max, fill)
    if out is None:
        raise MemoryError(f"Failed to allocate {name} schedule of length {k_max}")
    return out


def _result(status: SolverStatus, g1: np.ndarray, g2: np.ndarray, delta_t: float, normalize: bool) -> FPTDensity:
    if status != SolverStatus.SUCCESS:
        raise MemoryError("Failed to allocate solver scratch memory")
    density = FPTDensity(g1, g2, float(delta_t))
    return density.normalized() if normalize else density


def fpt(
    mu,
    sig2,
    b_lo,
    b_up,
    delta_t: float,
    t_max: float,
    *,
    b_lo_deriv=None,
    b_up_deriv=None,
    inv_leak: float = 0.0,
    normalize: bool = False,
) -> FPTDensity:
    """First-passage time densities for general drift, variance and boundaries.

    Uses `solve_fpt` for inv_leak == 0 and `solve_fpt_leak` otherwise. The
    process starts at 0, so the boundaries must satisfy b_lo < 0 < b_up at the
    first step and b_lo < b_up throughout.
    """
    k_max = _steps(delta_t, t_max)
    mu_v = _schedule("mu", mu, k_max)
    sig2_v = _schedule("sig2", sig2, k_max)
    b_lo_v = _schedule("b_lo", b_lo, k_max)
    b_up_v = _schedule("b_up", b_up, k_max)
    if np.any(sig2_v <= 0.0):
        raise ValueError("sig2 must be > 0")
    if not (b_lo_v[0] < 0.0 < b_up_v[0]):
        raise ValueError("Require b_lo < 0 < b_up at t=0")
    if np.any(b_lo_v >= b_up_v):
        raise ValueError("b_lo must stay below b_up")

    if b_lo_deriv is None:
        b_lo_deriv_v = bound_derivative(b_lo_v, delta_t, k_max)
    else:
        b_lo_deriv_v = _schedule("b_lo_deriv", b_lo_deriv, k_max, fill=0.0)
    if b_up_deriv is None:
        b_up_deriv_v = bound_derivative(b_up_v, delta_t, k_max)
    else:
        b_up_deriv_v = _schedule("b_up_deriv", b_up_deriv, k_max, fill=0.0)

    g1 = np.zeros(k_max, dtype=float)
    g2 = np.zeros(k_max, dtype=float)
    if float(inv_leak) == 0.0:
        status = solve_fpt(mu_v, sig2_v, b_lo_v, b_up_v, b_lo_deriv_v, b_up_deriv_v, delta_t, k_max, g1, g2)
    else:
        status = solve_fpt_leak(mu_v, sig2_v, b_lo_v, b_up_v, b_lo_deriv_v, b_up_deriv_v,
                                inv_leak, delta_t, k_max, g1, g2)
    return _result(status, g1, g2, delta_t, normalize)


def fpt_const(mu: float, bound: float, delta_t: float, t_max: float, *, normalize: bool = False) -> FPTDensity:
    """Closed-form densities for constant drift (any sign) and bounds +-bound."""
    mu = float(mu)
    k_max = _steps(delta_t, t_max)
    g1 = np.zeros(k_max, dtype=float)
    g2 = np.zeros(k_max, dtype=float)
    if mu > 0.0:
        status = const_bound_density(mu, bound, delta_t, k_max, g1, g2)
    elif mu < 0.0:
        # mirror image: upper and lower boundary swap roles
        status = const_bound_density(-mu, bound, delta_t, k_max, g2, g1)
    else:
        status = asym_bound_density(0.0, bound, -float(bound), delta_t, k_max, g1, g2)
    return _result(status, g1, g2, delta_t, normalize)


def fpt_sym_bound(mu, bound, delta_t: float, t_max: float, *, normalize: bool = False) -> FPTDensity:
    """Densities for unit variance and symmetric, possibly time-varying bounds.

    A positive scalar drift uses the reflection shortcut of `solve_fpt_const_mu`;
    anything else goes through `solve_fpt_sym_bound`.
    """
    k_max = _steps(delta_t, t_max)
    bound_v = _schedule("bound", bound, k_max)
    if np.any(bound_v <= 0.0):
        raise ValueError("bound must be > 0")
    g1 = np.zeros(k_max, dtype=float)
    g2 = np.zeros(k_max, dtype=float)
    if np.ndim(mu) == 0 and float(mu) > 0.0:
        status = solve_fpt_const_mu(float(mu), bound_v, delta_t, k_max, g1, g2)
    else:
        mu_v = _schedule("mu", mu, k_max)
        status = solve_fpt_sym_bound(mu_v, bound_v, delta_t, k_max, g1, g2)
    return _result(status, g1, g2, delta_t, normalize)


def fpt_weighted(mu, bound, k: float, delta_t: float, t_max: float, *, normalize: bool = False) -> FPTDensity:
    """Densities of the weighted-input model, see `solve_fpt_weighted`."""
    k_max = _steps(delta_t, t_max)
    mu_v = _schedule("mu", mu, k_max)
    bound_v = _schedule("bound", bound, k_max)
    if mu_v[0] == 0.0:
        raise ValueError("mu must not vanish at the first step")
    if np.any(bound_v <= 0.0):
        raise ValueError("bound must be > 0")
    g1 = np.zeros(k_max, dtype=float)
    g2 = np.zeros(k_max, dtype=float)
    status = solve_fpt_weighted(mu_v, bound_v, k, delta_t, k_max, g1, g2)
    return _result(status, g1, g2, delta_t, normalize)
