"""First-passage time densities for time-varying drift, variance and boundaries.

The densities solve the coupled pair of Volterra integral equations

    g1(t) = -2 psi(b_up(t), t | 0, 0)
            + int_0^t [g1(s) 2 psi(b_up(t), t | b_up(s), s) + g2(s) 2 psi(b_up(t), t | b_lo(s), s)] ds
    g2(t) = +2 psi(b_lo(t), t | 0, 0)
            - int_0^t [g1(s) 2 psi(b_lo(t), t | b_up(s), s) + g2(s) 2 psi(b_lo(t), t | b_lo(s), s)] ds

where psi is the Gaussian transition density times the rate at which the
boundary moves away from the drifting mean. The integrals are discretised on
the grid t_k = (k + 1) * delta_t, so step k only depends on steps j < k and the
densities are filled in one forward sweep (O(k_max^2) work).

With a leak (inverse time constant `inv_leak`), accumulated drift and variance
decay exponentially, which turns the process into an Ornstein-Uhlenbeck process
pulled towards zero.

The sweep runs on scratch buffers of length k_max (`_Work`); the densities are
copied into the caller's g1 / g2 only once it has completed.
"""

from __future__ import annotations

import logging
from math import exp, sqrt

import numpy as np
from scipy.signal import lfilter

from ..numerics import INV_SQRT_TWOPI, as_schedule, check_grid, check_outputs
from ..scratch import SolverStatus, allocate

_logger = logging.getLogger(__name__)

# g1, g2 staging plus the per-step buffers of `_Work`
_N_WORK = 10


class _Work:
    """Per-step working buffers; element j always belongs to step j < k."""

    def __init__(self, arrays):
        (self.g1, self.g2, self.var, self.shift, self.scale,
         self.w1, self.w2, self.diff, self.tmp, self.kern) = arrays

    def crossing_kernel(self, b_k: float, b_j: np.ndarray, drift: float, sig2_k: float, k: int) -> np.ndarray:
        """Kernel for a crossing at b_j[j] followed by one at b_k, written to kern[:k].

        Expects var[:k] and shift[:k] to hold the variance and drift offset of
        each transition j -> k.
        """
        diff = self.diff[:k]
        tmp = self.tmp[:k]
        kern = self.kern[:k]
        var = self.var[:k]
        np.subtract(b_k, b_j, out=diff)
        np.add(diff, self.shift[:k], out=diff)
        np.divide(diff, var, out=tmp)
        np.multiply(tmp, diff, out=kern)
        np.multiply(kern, -0.5, out=kern)
        np.exp(kern, out=kern)
        np.multiply(tmp, -sig2_k, out=tmp)
        np.add(tmp, drift, out=tmp)
        np.multiply(kern, tmp, out=kern)
        return kern


def _leaky_cumsum(x: np.ndarray, decay: float, out: np.ndarray) -> np.ndarray:
    """out[k] = decay * out[k-1] + x[k], with out[-1] = 0."""
    out[:] = lfilter([1.0], [1.0, -decay], x)
    return out


def _fill_densities(
    mu: np.ndarray,
    sig2: np.ndarray,
    b_lo: np.ndarray,
    b_up: np.ndarray,
    b_lo_deriv: np.ndarray,
    b_up_deriv: np.ndarray,
    inv_leak: float,
    cum_mu: np.ndarray,
    cum_sig2: np.ndarray,
    disc: np.ndarray | None,
    disc2: np.ndarray | None,
    b_up_disc: np.ndarray | None,
    b_lo_disc: np.ndarray | None,
    delta_t: float,
    k_max: int,
    work: _Work,
) -> None:
    """Forward sweep over the grid into work.g1 / work.g2; `disc is None` means no leak."""
    g1 = work.g1
    g2 = work.g2
    delta_t_sqrt_2_pi = delta_t * INV_SQRT_TWOPI
    for k in range(k_max):
        sig2_k = float(sig2[k])
        b_up_k = float(b_up[k])
        b_lo_k = float(b_lo[k])
        cum_mu_k = float(cum_mu[k])
        cum_sig2_k = float(cum_sig2[k])
        b_up_drift_k = float(b_up_deriv[k]) + inv_leak * b_up_k - float(mu[k])
        b_lo_drift_k = float(b_lo_deriv[k]) + inv_leak * b_lo_k - float(mu[k])

        # direct transition from the start, no earlier crossing
        up_k = b_up_k - cum_mu_k
        lo_k = b_lo_k - cum_mu_k
        norm_k = INV_SQRT_TWOPI / sqrt(cum_sig2_k)
        g1_k = -norm_k * exp(-0.5 * up_k * up_k / cum_sig2_k) * (b_up_drift_k - sig2_k * up_k / cum_sig2_k)
        g2_k = norm_k * exp(-0.5 * lo_k * lo_k / cum_sig2_k) * (b_lo_drift_k - sig2_k * lo_k / cum_sig2_k)

        if k > 0:
            # paths that crossed at step j < k
            var = work.var[:k]
            shift = work.shift[:k]
            scale = work.scale[:k]
            w1 = work.w1[:k]
            w2 = work.w2[:k]
            if disc is None:
                np.subtract(cum_sig2_k, cum_sig2[:k], out=var)
                np.subtract(cum_mu[:k], cum_mu_k, out=shift)
                b_up_j = b_up[:k]
                b_lo_j = b_lo[:k]
            else:
                disc_j = disc[k - 1::-1]
                np.multiply(disc2[k - 1::-1], cum_sig2[:k], out=var)
                np.subtract(cum_sig2_k, var, out=var)
                np.multiply(disc_j, cum_mu[:k], out=shift)
                np.subtract(shift, cum_mu_k, out=shift)
                b_up_j = np.multiply(disc_j, b_up[:k], out=b_up_disc[:k])
                b_lo_j = np.multiply(disc_j, b_lo[:k], out=b_lo_disc[:k])
            np.sqrt(var, out=scale)
            np.divide(delta_t_sqrt_2_pi, scale, out=scale)
            np.multiply(scale, g1[:k], out=w1)
            np.multiply(scale, g2[:k], out=w2)

            g1_k += float(np.dot(w1, work.crossing_kernel(b_up_k, b_up_j, b_up_drift_k, sig2_k, k)))
            g1_k += float(np.dot(w2, work.crossing_kernel(b_up_k, b_lo_j, b_up_drift_k, sig2_k, k)))
            g2_k -= float(np.dot(w1, work.crossing_kernel(b_lo_k, b_up_j, b_lo_drift_k, sig2_k, k)))
            g2_k -= float(np.dot(w2, work.crossing_kernel(b_lo_k, b_lo_j, b_lo_drift_k, sig2_k, k)))

        # cancellation between large terms can leave small negative values
        g1[k] = max(g1_k, 0.0)
        g2[k] = max(g2_k, 0.0)


def solve_fpt(
    mu,
    sig2,
    b_lo,
    b_up,
    b_lo_deriv,
    b_up_deriv,
    delta_t: float,
    k_max: int,
    g1: np.ndarray,
    g2: np.ndarray,
) -> SolverStatus:
    """First-passage time densities without leak.

    Parameters
    ----------
    mu, sig2 : per-step drift rates and diffusion variances (sig2 > 0).
    b_lo, b_up : per-step lower / upper boundaries, b_lo < 0 < b_up at the start.
    b_lo_deriv, b_up_deriv : per-step time derivatives of the boundaries.
    delta_t : step size in seconds.
    k_max : number of steps, t_max = k_max * delta_t.
    g1, g2 : caller-owned float arrays (length >= k_max) that receive the
        upper / lower boundary densities at t = (k + 1) * delta_t.

    Returns SolverStatus.SUCCESS, or SolverStatus.ALLOCATION_FAILED with
    g1 / g2 untouched.
    """
    delta_t, k_max = check_grid(delta_t, k_max)
    mu = as_schedule("mu", mu, k_max)
    sig2 = as_schedule("sig2", sig2, k_max)
    b_lo = as_schedule("b_lo", b_lo, k_max)
    b_up = as_schedule("b_up", b_up, k_max)
    b_lo_deriv = as_schedule("b_lo_deriv", b_lo_deriv, k_max)
    b_up_deriv = as_schedule("b_up_deriv", b_up_deriv, k_max)
    check_outputs(g1, g2, k_max)

    scratch = allocate(k_max, 2 + _N_WORK)
    if scratch is None:
        return SolverStatus.ALLOCATION_FAILED
    cum_mu, cum_sig2 = scratch[:2]
    work = _Work(scratch[2:])

    try:
        np.multiply(mu, delta_t, out=cum_mu)
        np.multiply(sig2, delta_t, out=cum_sig2)
        _leaky_cumsum(cum_mu, 1.0, cum_mu)
        _leaky_cumsum(cum_sig2, 1.0, cum_sig2)
        _fill_densities(mu, sig2, b_lo, b_up, b_lo_deriv, b_up_deriv, 0.0,
                        cum_mu, cum_sig2, None, None, None, None, delta_t, k_max, work)
    except MemoryError:
        _logger.warning("solve_fpt: out of memory during the sweep (k_max=%d), outputs untouched", k_max)
        return SolverStatus.ALLOCATION_FAILED
    g1[:k_max] = work.g1
    g2[:k_max] = work.g2
    return SolverStatus.SUCCESS


def solve_fpt_leak(
    mu,
    sig2,
    b_lo,
    b_up,
    b_lo_deriv,
    b_up_deriv,
    inv_leak: float,
    delta_t: float,
    k_max: int,
    g1: np.ndarray,
    g2: np.ndarray,
) -> SolverStatus:
    """First-passage time densities with leak `inv_leak` (1 / time constant, >= 0).

    Arguments and result as for `solve_fpt`. With inv_leak == 0 the output is
    identical to `solve_fpt`.
    """
    inv_leak = float(inv_leak)
    if not (np.isfinite(inv_leak) and inv_leak >= 0.0):
        raise ValueError("inv_leak must be finite and >= 0")
    delta_t, k_max = check_grid(delta_t, k_max)
    mu = as_schedule("mu", mu, k_max)
    sig2 = as_schedule("sig2", sig2, k_max)
    b_lo = as_schedule("b_lo", b_lo, k_max)
    b_up = as_schedule("b_up", b_up, k_max)
    b_lo_deriv = as_schedule("b_lo_deriv", b_lo_deriv, k_max)
    b_up_deriv = as_schedule("b_up_deriv", b_up_deriv, k_max)
    check_outputs(g1, g2, k_max)

    scratch = allocate(k_max, 6 + _N_WORK)
    if scratch is None:
        return SolverStatus.ALLOCATION_FAILED
    cum_mu, cum_sig2, disc, disc2, b_up_disc, b_lo_disc = scratch[:6]
    work = _Work(scratch[6:])

    exp_leak = exp(-delta_t * inv_leak)
    exp2_leak = exp(-2.0 * delta_t * inv_leak)
    try:
        np.multiply(mu, delta_t, out=cum_mu)
        np.multiply(sig2, delta_t, out=cum_sig2)
        _leaky_cumsum(cum_mu, exp_leak, cum_mu)
        _leaky_cumsum(cum_sig2, exp2_leak, cum_sig2)

        # disc[i] = exp(-inv_leak * delta_t * (i + 1)), disc2[i] = disc[i]^2.
        # disc2[i] = disc[2i + 1] covers the first half; the rest continues by
        # repeated multiplication.
        disc.fill(exp_leak)
        np.cumprod(disc, out=disc)
        n_half = k_max // 2
        disc2[:n_half] = disc[1::2]
        start = float(disc2[n_half - 1]) if n_half else 1.0
        tail = disc2[n_half:]
        tail.fill(exp2_leak)
        np.cumprod(tail, out=tail)
        tail *= start

        _fill_densities(mu, sig2, b_lo, b_up, b_lo_deriv, b_up_deriv, inv_leak,
                        cum_mu, cum_sig2, disc, disc2, b_up_disc, b_lo_disc, delta_t, k_max, work)
    except MemoryError:
        _logger.warning("solve_fpt_leak: out of memory during the sweep (k_max=%d), outputs untouched", k_max)
        return SolverStatus.ALLOCATION_FAILED
    g1[:k_max] = work.g1
    g2[:k_max] = work.g2
    return SolverStatus.SUCCESS
