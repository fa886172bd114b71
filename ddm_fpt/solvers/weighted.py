"""Weighted-input recursion, time measured in accumulated squared drift.

The process is dx = k a(t)^2 dt + a(t) dW with a(t) = mu(t), i.e. the
momentary evidence is weighted by its own reliability. Its natural clock is

    A(t) = int_0^t a(s)^2 ds,

which replaces the cumulative variance of the general solver. With symmetric
boundaries +-bound(t) the lower density is a reflection of the upper one,
g2(t) = exp(-2 k bound(t)) g1(t), so only g1 is solved recursively.
"""

from __future__ import annotations

import logging
from math import exp, sqrt

import numpy as np

from ..numerics import TWOPI, as_schedule, bound_derivative, check_grid, check_outputs
from ..scratch import SolverStatus, allocate

_logger = logging.getLogger(__name__)


def _kernel(diff, A_diff, k, bound_deriv_n, a2_n, diff_A, tmp, out):
    """exp(-(diff - k A_diff)^2 / 2 A_diff) * (bound_deriv_n - a2_n diff / A_diff) into `out`."""
    np.multiply(A_diff, k, out=diff_A)
    np.subtract(diff, diff_A, out=diff_A)
    np.multiply(diff_A, diff_A, out=out)
    np.divide(out, A_diff, out=out)
    np.multiply(out, -0.5, out=out)
    np.exp(out, out=out)
    np.divide(diff, A_diff, out=tmp)
    np.multiply(tmp, -a2_n, out=tmp)
    np.add(tmp, bound_deriv_n, out=tmp)
    np.multiply(out, tmp, out=out)
    return out


def solve_fpt_weighted(
    mu,
    bound,
    k: float,
    delta_t: float,
    k_max: int,
    g1: np.ndarray,
    g2: np.ndarray,
) -> SolverStatus:
    """Densities for the weighted-input model.

    Parameters
    ----------
    mu : per-step input a(t); must not vanish at the first step.
    bound : per-step symmetric boundary +-bound(t).
    k : proportionality factor of the drift, k a(t)^2.
    delta_t, k_max, g1, g2 : as for `solve_fpt`.
    """
    k = float(k)
    if not np.isfinite(k):
        raise ValueError("k must be finite")
    delta_t, k_max = check_grid(delta_t, k_max)
    mu = as_schedule("mu", mu, k_max)
    bound = as_schedule("bound", bound, k_max)
    check_outputs(g1, g2, k_max)

    scratch = allocate(k_max, 13)
    if scratch is None:
        return SolverStatus.ALLOCATION_FAILED
    (a2, A, bound_deriv, h1, h2, A_diff, norm,
     w1, w2, diff, diff_A, tmp, kern) = scratch

    try:
        np.multiply(mu, mu, out=a2)
        np.multiply(a2, delta_t, out=A)
        np.cumsum(A, out=A)
        bound_derivative(bound, delta_t, k_max, out=bound_deriv)
        k_2 = -2.0 * k

        for n in range(k_max):
            bound_n = float(bound[n])
            a2_n = float(a2[n])
            A_n = float(A[n])
            bound_deriv_n = float(bound_deriv[n])

            d_n = bound_n - k * A_n
            g1_n = -exp(-0.5 * d_n * d_n / A_n) / sqrt(TWOPI * A_n) * (bound_deriv_n - bound_n / A_n * a2_n)

            if n > 0:
                bound_j = bound[:n]
                A_kj = np.subtract(A_n, A[:n], out=A_diff[:n])
                nrm = np.multiply(A_kj, TWOPI, out=norm[:n])
                np.sqrt(nrm, out=nrm)
                w1_j = np.divide(h1[:n], nrm, out=w1[:n])
                w2_j = np.divide(h2[:n], nrm, out=w2[:n])
                d = diff[:n]
                d_A = diff_A[:n]
                t_ = tmp[:n]
                kr = kern[:n]
                # from the upper (bound_n - bound_j) and lower (bound_n + bound_j) boundary at j
                g1_n += delta_t * float(np.dot(w1_j, _kernel(
                    np.subtract(bound_n, bound_j, out=d), A_kj, k, bound_deriv_n, a2_n, d_A, t_, kr)))
                g1_n += delta_t * float(np.dot(w2_j, _kernel(
                    np.add(bound_n, bound_j, out=d), A_kj, k, bound_deriv_n, a2_n, d_A, t_, kr)))

            h1[n] = max(g1_n, 0.0)
            h2[n] = max(g1_n * exp(k_2 * bound_n), 0.0)
    except MemoryError:
        _logger.warning("solve_fpt_weighted: out of memory during the sweep (k_max=%d), outputs untouched", k_max)
        return SolverStatus.ALLOCATION_FAILED
    g1[:k_max] = h1
    g2[:k_max] = h2
    return SolverStatus.SUCCESS
