"""Series expansions for the first-passage time density of a standard diffusion.

All functions evaluate the density at the *lower* boundary of a zero-drift,
unit-variance diffusion between boundaries {0, 1} that starts at w in (0, 1),
following Navarro & Fuss (2009), "Fast and accurate calculations for
first-passage times in Wiener diffusion models", J. Math. Psych. 53, 222-230.

Two expansions are available:
- the short-time series (their Eq. 6), a sum of Gaussian image terms
- the long-time series (their Eq. 5), a Fourier-sine series
Each is cheap in a different regime; `use_short_series` picks the faster one.

Every loop is bounded by `max_terms`. When the bound is hit, the partial sum is
returned and a warning is logged.
"""

from __future__ import annotations

import logging
from math import exp, fabs, log, sin, sqrt

from .numerics import MAX_SERIES_TERMS, PI, PISQR, TWOPI

_logger = logging.getLogger(__name__)


def use_short_series(t: float, tol: float) -> bool:
    """Navarro & Fuss (2009), Eq. 13: True if the short-time series is faster.

    Compares the number of terms each series needs for absolute accuracy `tol`.
    Outside the real domain of either bound (where the literal inequality
    evaluates to NaN) the comparison is false and the long-time series is used.
    A log argument that underflows to zero makes that side infinite.
    """
    t = float(t)
    tol = float(tol)
    if not (t > 0.0 and tol > 0.0):
        return False
    short_arg = 2.0 * tol * sqrt(TWOPI * t)
    long_arg = PI * t * tol
    if short_arg > 1.0 or long_arg > 1.0:
        return False
    if short_arg == 0.0:
        return False
    if long_arg == 0.0:
        return True
    return 2.0 + sqrt(-2.0 * t * log(short_arg)) < sqrt(-2.0 * log(long_arg) / (t * PISQR))


def short_time_series(t: float, w: float, tol: float, max_terms: int = MAX_SERIES_TERMS) -> float:
    """Short-time expansion, Navarro & Fuss (2009) Eq. 6.

    Image terms at w + 2k and w - 2k are added in turn until the magnitude of
    the last added term drops below tol. The prefactor t^-1.5 / sqrt(2 pi) is
    folded into each exponent so that tiny t does not overflow it.
    """
    t = float(t)
    w = float(w)
    tol = float(tol)
    if not t > 0.0:
        raise ValueError("t must be > 0")
    log_b = -1.5 * log(t) - 0.5 * log(TWOPI)
    two_t = 2.0 * t
    f = w * exp(log_b - w * w / two_t)
    for k in range(1, int(max_terms) + 1):
        c = w + 2 * k
        incr = c * exp(log_b - c * c / two_t)
        f += incr
        if fabs(incr) < tol:
            return f
        c = w - 2 * k
        incr = c * exp(log_b - c * c / two_t)
        f += incr
        if fabs(incr) < tol:
            return f
    _logger.warning("short-time series not converged after %d terms (t=%g, w=%g)", max_terms, t, w)
    return f


def long_time_series(t: float, w: float, tol: float, max_terms: int = MAX_SERIES_TERMS) -> float:
    """Long-time expansion, Navarro & Fuss (2009) Eq. 5."""
    t = float(t)
    w = float(w)
    if not t > 0.0:
        raise ValueError("t must be > 0")
    tol = float(tol) * PI
    f = 0.0
    for k in range(1, int(max_terms) + 1):
        kpi = k * PI
        incr = k * exp(-(kpi * kpi) * t / 2.0) * sin(kpi * w)
        f += incr
        if fabs(incr) < tol:
            return f * PI
    _logger.warning("long-time series not converged after %d terms (t=%g, w=%g)", max_terms, t, w)
    return f * PI


def fast_series(t: float, w: float, tol: float, max_terms: int = MAX_SERIES_TERMS) -> float:
    """Lower-boundary density at t for a start at w, using the faster series.

    Returns exactly 0 at t == 0: a start strictly inside (0, 1) cannot be
    absorbed before any time has elapsed.
    """
    if t == 0.0:
        return 0.0
    if t < 0.0:
        raise ValueError("t must be >= 0")
    if use_short_series(t, tol):
        return short_time_series(t, w, tol, max_terms)
    return long_time_series(t, w, tol, max_terms)


def sym_series(a: float, b: float, tol: float, max_terms: int = MAX_SERIES_TERMS) -> float:
    """Midpoint-start series b * (e^-a - 3 e^-9a + 5 e^-25a - ...).

    Both expansions reduce to this form for w = 1/2; only (a, b) differ, see
    `sym_fast_series`. Terms are added pairwise until one drops below tol * b.
    """
    a = float(a)
    b = float(b)
    tol = float(tol) * b
    f = exp(-a)
    twok = 3
    for _ in range(int(max_terms)):
        incr = twok * exp(-(twok * twok) * a)
        f -= incr
        if incr < tol:
            return f * b
        twok += 2
        incr = twok * exp(-(twok * twok) * a)
        f += incr
        if incr < tol:
            return f * b
        twok += 2
    _logger.warning("symmetric series not converged after %d terms (a=%g, b=%g)", max_terms, a, b)
    return f * b


def sym_fast_series(t: float, tol: float, max_terms: int = MAX_SERIES_TERMS) -> float:
    """Lower-boundary density at t for a start at the midpoint w = 1/2."""
    if t == 0.0:
        return 0.0
    if t < 0.0:
        raise ValueError("t must be >= 0")
    if use_short_series(t, tol):
        a = 1.0 / (8.0 * t)
        log_b = -0.5 * log(8.0 * PI) - 1.5 * log(t)
        # leading term b e^-a below the smallest subnormal
        if log_b - a < -746.0:
            return 0.0
        return sym_series(a, exp(log_b), tol, max_terms)
    return sym_series(t * PISQR / 2.0, PI, tol, max_terms)
