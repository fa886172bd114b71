"""First-passage time densities for constant drift and constant boundaries.

With constant drift mu, unit diffusion variance and fixed boundaries
bl < 0 < bu, every grid time is independent of the others. The density is the
standard {0, 1} series density after rescaling time by c1 = (bu - bl)^2 and
multiplying by the drift factor exp(c - mu^2 t / 2):

    g_up(t) = exp(mu bu - c2 t) / c1 * f(t / c1 | 1 - w)
    g_lo(t) = exp(mu bl - c2 t) / c1 * f(t / c1 | w),      w = -bl / (bu - bl)

For symmetric boundaries +-bound the start is the midpoint and the lower
density is exp(-2 mu bound) times the upper one.
"""

from __future__ import annotations

from math import exp

import numpy as np

from .numerics import SERIES_ACC, check_grid, check_outputs
from .scratch import SolverStatus
from .series import fast_series, sym_fast_series


def sym_up_density(t: float, c1: float, c2: float, c3: float) -> float:
    """Upper-boundary density for symmetric bounds.

    c1 = 4 bound^2, c2 = mu^2 / 2, c3 = mu bound.
    """
    return exp(c3 - c2 * t) / c1 * sym_fast_series(t / c1, SERIES_ACC)


def asym_up_density(t: float, c1: float, c2: float, c3: float, w: float) -> float:
    """Upper-boundary density for asymmetric bounds.

    c1 = (bu - bl)^2, c2 = mu^2 / 2, c3 = mu bu, w = -bl / (bu - bl).
    """
    return exp(c3 - c2 * t) / c1 * fast_series(t / c1, 1.0 - w, SERIES_ACC)


def asym_lo_density(t: float, c1: float, c2: float, c4: float, w: float) -> float:
    """Lower-boundary density for asymmetric bounds; as `asym_up_density` with c4 = mu bl."""
    return exp(c4 - c2 * t) / c1 * fast_series(t / c1, w, SERIES_ACC)


def const_bound_density(
    mu: float,
    bound: float,
    delta_t: float,
    k_max: int,
    g1: np.ndarray,
    g2: np.ndarray,
) -> SolverStatus:
    """Fill g1 / g2 with the densities for drift mu and bounds +-bound.

    g1[k] and g2[k] hold the upper / lower density at t = (k + 1) * delta_t.
    Requires mu > 0 and bound > 0.
    """
    mu = float(mu)
    bound = float(bound)
    if not mu > 0.0:
        raise ValueError("mu must be > 0")
    if not bound > 0.0:
        raise ValueError("bound must be > 0")
    delta_t, k_max = check_grid(delta_t, k_max)
    check_outputs(g1, g2, k_max)

    c1 = 4.0 * (bound * bound)
    c2 = (mu * mu) / 2.0
    c3 = mu * bound
    c4 = exp(-2.0 * c3)
    for i in range(k_max):
        g = sym_up_density((i + 1) * delta_t, c1, c2, c3)
        g1[i] = max(g, 0.0)
        g2[i] = max(c4 * g, 0.0)
    return SolverStatus.SUCCESS


def asym_bound_density(
    mu: float,
    bu: float,
    bl: float,
    delta_t: float,
    k_max: int,
    g1: np.ndarray,
    g2: np.ndarray,
) -> SolverStatus:
    """Fill g1 / g2 with the densities for drift mu and bounds bl < 0 < bu.

    Unlike `const_bound_density` the drift may have any sign.
    """
    mu = float(mu)
    bu = float(bu)
    bl = float(bl)
    if not np.isfinite(mu):
        raise ValueError("mu must be finite")
    if not (bl < 0.0 < bu):
        raise ValueError("Require bl < 0 < bu")
    delta_t, k_max = check_grid(delta_t, k_max)
    check_outputs(g1, g2, k_max)

    c1 = (bu - bl) ** 2
    c2 = (mu * mu) / 2.0
    c3 = mu * bu
    c4 = mu * bl
    w = -bl / (bu - bl)
    for i in range(k_max):
        t = (i + 1) * delta_t
        g1[i] = max(asym_up_density(t, c1, c2, c3, w), 0.0)
        g2[i] = max(asym_lo_density(t, c1, c2, c4, w), 0.0)
    return SolverStatus.SUCCESS
