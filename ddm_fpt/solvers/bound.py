"""Recursions for symmetric boundaries +-bound(t) and unit diffusion variance.

With unit variance the cumulative variance between two grid points only
depends on their distance, so the normalisation factors are tabulated once:

    norm_sqrt_t[i] = 1 / sqrt(2 pi delta_t (i + 1)),   norm_t[i] = 1 / (delta_t (i + 1))

Boundary derivatives are estimated by forward differences
(see `ddm_fpt.numerics.bound_derivative`). As in `ddm_fpt.solvers.full`, the
sweep works on scratch buffers and the caller's outputs are only written once
it has completed.
"""

from __future__ import annotations

import logging
from math import exp

import numpy as np

from ..numerics import TWOPI, as_schedule, bound_derivative, check_grid, check_outputs
from ..scratch import SolverStatus, allocate

_logger = logging.getLogger(__name__)

# g1, g2 staging, offsets b_j + m_kj / b_j - m_kj, weights, kernel buffers
_N_WORK = 9


def _time_tables(delta_t: float, norm_sqrt_t: np.ndarray, norm_t: np.ndarray) -> None:
    norm_t.fill(1.0)
    np.cumsum(norm_t, out=norm_t)
    np.multiply(norm_t, delta_t, out=norm_t)
    np.multiply(norm_t, TWOPI, out=norm_sqrt_t)
    np.sqrt(norm_sqrt_t, out=norm_sqrt_t)
    np.reciprocal(norm_sqrt_t, out=norm_sqrt_t)
    np.reciprocal(norm_t, out=norm_t)


def _kernel(diff: np.ndarray, norm_t: np.ndarray, drift: float, tmp: np.ndarray, out: np.ndarray) -> np.ndarray:
    """exp(-diff^2 norm_t / 2) * (drift - diff norm_t) into `out`."""
    np.multiply(diff, norm_t, out=tmp)
    np.multiply(tmp, diff, out=out)
    np.multiply(out, -0.5, out=out)
    np.exp(out, out=out)
    np.subtract(drift, tmp, out=tmp)
    np.multiply(out, tmp, out=out)
    return out


def solve_fpt_sym_bound(mu, bound, delta_t: float, k_max: int, g1: np.ndarray, g2: np.ndarray) -> SolverStatus:
    """Densities for time-varying drift `mu` and boundaries +-`bound`.

    Both g1 (upper) and g2 (lower) are solved recursively. Outputs follow the
    grid and status conventions of `solve_fpt`.
    """
    delta_t, k_max = check_grid(delta_t, k_max)
    mu = as_schedule("mu", mu, k_max)
    bound = as_schedule("bound", bound, k_max)
    check_outputs(g1, g2, k_max)

    scratch = allocate(k_max, 5 + _N_WORK)
    if scratch is None:
        return SolverStatus.ALLOCATION_FAILED
    (cum_mu, bound_deriv, norm_sqrt_t, norm_t, cum_mu_diff,
     h1, h2, b_plus, b_minus, w1, w2, diff, tmp, kern) = scratch

    try:
        np.multiply(mu, delta_t, out=cum_mu)
        np.cumsum(cum_mu, out=cum_mu)
        bound_derivative(bound, delta_t, k_max, out=bound_deriv)
        _time_tables(delta_t, norm_sqrt_t, norm_t)

        for k in range(k_max):
            bound_k = float(bound[k])
            mu_k = float(mu[k])
            drift_up = float(bound_deriv[k]) - mu_k
            drift_lo = -float(bound_deriv[k]) - mu_k
            cum_mu_k = float(cum_mu[k])
            nt = float(norm_t[k])
            nst = float(norm_sqrt_t[k])

            up = bound_k - cum_mu_k
            lo = -bound_k - cum_mu_k
            g1_k = -nst * exp(-0.5 * up * up * nt) * (drift_up - up * nt)
            g2_k = nst * exp(-0.5 * lo * lo * nt) * (drift_lo - lo * nt)

            if k > 0:
                nt_j = norm_t[k - 1::-1]
                m_kj = np.subtract(cum_mu_k, cum_mu[:k], out=cum_mu_diff[:k])
                plus = np.add(bound[:k], m_kj, out=b_plus[:k])
                minus = np.subtract(bound[:k], m_kj, out=b_minus[:k])
                w1_j = np.multiply(norm_sqrt_t[k - 1::-1], h1[:k], out=w1[:k])
                w2_j = np.multiply(norm_sqrt_t[k - 1::-1], h2[:k], out=w2[:k])
                d = diff[:k]
                t_ = tmp[:k]
                kr = kern[:k]

                # upper boundary at k, coming from the upper (plus) / lower (minus) boundary at j
                g1_k += delta_t * float(np.dot(w1_j, _kernel(np.subtract(bound_k, plus, out=d), nt_j, drift_up, t_, kr)))
                g1_k += delta_t * float(np.dot(w2_j, _kernel(np.add(bound_k, minus, out=d), nt_j, drift_up, t_, kr)))
                g2_k -= delta_t * float(np.dot(w1_j, _kernel(np.subtract(-bound_k, plus, out=d), nt_j, drift_lo, t_, kr)))
                g2_k -= delta_t * float(np.dot(w2_j, _kernel(np.add(-bound_k, minus, out=d), nt_j, drift_lo, t_, kr)))

            h1[k] = max(g1_k, 0.0)
            h2[k] = max(g2_k, 0.0)
    except MemoryError:
        _logger.warning("solve_fpt_sym_bound: out of memory during the sweep (k_max=%d), outputs untouched", k_max)
        return SolverStatus.ALLOCATION_FAILED
    g1[:k_max] = h1
    g2[:k_max] = h2
    return SolverStatus.SUCCESS


def solve_fpt_const_mu(mu: float, bound, delta_t: float, k_max: int, g1: np.ndarray, g2: np.ndarray) -> SolverStatus:
    """Densities for constant drift `mu` > 0 and boundaries +-`bound`.

    Only g1 is solved recursively. For symmetric boundaries and constant drift
    the lower density follows by reflection, g2(t) = exp(-2 mu bound(t)) g1(t).

    Both crossing terms of g1, including the one coming from the lower
    boundary, use the upper-boundary drift b'(t_k) - mu, as the general
    recursion does for the upper boundary. The lower boundary's derivative
    -b'(t_k) does not enter. With this choice the result agrees with
    `solve_fpt_sym_bound` for constant drift.
    """
    mu = float(mu)
    if not mu > 0.0:
        raise ValueError("mu must be > 0")
    delta_t, k_max = check_grid(delta_t, k_max)
    bound = as_schedule("bound", bound, k_max)
    check_outputs(g1, g2, k_max)

    scratch = allocate(k_max, 4 + _N_WORK)
    if scratch is None:
        return SolverStatus.ALLOCATION_FAILED
    (bound_deriv, norm_sqrt_t, norm_t, cum_mu_steps,
     h1, h2, b_plus, b_minus, w1, w2, diff, tmp, kern) = scratch

    try:
        bound_derivative(bound, delta_t, k_max, out=bound_deriv)
        _time_tables(delta_t, norm_sqrt_t, norm_t)
        # cum_mu_steps[i] = mu * delta_t * (i + 1), the drift accumulated over i + 1 steps
        mu_delta_t = delta_t * mu
        cum_mu_steps.fill(1.0)
        np.cumsum(cum_mu_steps, out=cum_mu_steps)
        np.multiply(cum_mu_steps, mu_delta_t, out=cum_mu_steps)
        mu_2 = -2.0 * mu

        for k in range(k_max):
            bound_k = float(bound[k])
            drift_up = float(bound_deriv[k]) - mu
            cum_mu_k = float(cum_mu_steps[k])
            nt = float(norm_t[k])
            nst = float(norm_sqrt_t[k])

            up = bound_k - cum_mu_k
            g1_k = -nst * exp(-0.5 * up * up * nt) * (drift_up - up * nt)

            if k > 0:
                nt_j = norm_t[k - 1::-1]
                m_kj = cum_mu_steps[k - 1::-1]
                plus = np.add(bound[:k], m_kj, out=b_plus[:k])
                minus = np.subtract(bound[:k], m_kj, out=b_minus[:k])
                w1_j = np.multiply(norm_sqrt_t[k - 1::-1], h1[:k], out=w1[:k])
                w2_j = np.multiply(norm_sqrt_t[k - 1::-1], h2[:k], out=w2[:k])
                d = diff[:k]
                t_ = tmp[:k]
                kr = kern[:k]
                g1_k += delta_t * float(np.dot(w1_j, _kernel(np.subtract(bound_k, plus, out=d), nt_j, drift_up, t_, kr)))
                g1_k += delta_t * float(np.dot(w2_j, _kernel(np.add(bound_k, minus, out=d), nt_j, drift_up, t_, kr)))

            h1[k] = max(g1_k, 0.0)
            h2[k] = max(g1_k * exp(mu_2 * bound_k), 0.0)
    except MemoryError:
        _logger.warning("solve_fpt_const_mu: out of memory during the sweep (k_max=%d), outputs untouched", k_max)
        return SolverStatus.ALLOCATION_FAILED
    g1[:k_max] = h1
    g2[:k_max] = h2
    return SolverStatus.SUCCESS
