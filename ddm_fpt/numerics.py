"""Numerical constants and array helpers shared by the FPT solvers.

Besides the named constants used throughout the package this module holds the
small O(n) collaborators that sit around the solvers:
- argument checks for time grids, schedules and caller-owned output buffers
- the forward-difference boundary derivative
- `extend_vector` (bring a schedule to a new length)
- `mass_normalize` (patch a density pair so its total mass is one)
"""

from __future__ import annotations

import logging
import math

import numpy as np

_logger = logging.getLogger(__name__)

PI = math.pi
TWOPI = 2.0 * PI
PISQR = PI * PI
INV_SQRT_TWOPI = 1.0 / math.sqrt(TWOPI)

# Absolute accuracy of the infinite series used by the closed-form densities.
SERIES_ACC = 1e-29
# Hard cap on series iterations; reaching it means the tolerance was unusable.
MAX_SERIES_TERMS = 10_000


def check_grid(delta_t: float, k_max: int) -> tuple[float, int]:
    """Validate and normalise a time grid (step size, number of steps)."""
    delta_t = float(delta_t)
    if not (np.isfinite(delta_t) and delta_t > 0.0):
        raise ValueError("delta_t must be finite and > 0")
    if int(k_max) != k_max or int(k_max) <= 0:
        raise ValueError("k_max must be a positive integer")
    return delta_t, int(k_max)


def as_schedule(name: str, values, k_max: int) -> np.ndarray:
    """Return the first `k_max` elements of a per-step schedule as a float array."""
    if values is None:
        raise ValueError(f"{name} is required")
    arr = np.asarray(values, dtype=float).reshape((-1,))
    if arr.size < k_max:
        raise ValueError(f"{name} must have at least k_max={k_max} elements, got {arr.size}")
    return arr[:k_max]


def check_outputs(g1: np.ndarray, g2: np.ndarray, k_max: int) -> None:
    """Validate the caller-owned density buffers that a solver writes in place."""
    for name, g in (("g1", g1), ("g2", g2)):
        if not isinstance(g, np.ndarray):
            raise ValueError(f"{name} must be a numpy array owned by the caller")
        if g.ndim != 1 or g.dtype != np.float64:
            raise ValueError(f"{name} must be a 1-D float64 array")
        if g.size < k_max:
            raise ValueError(f"{name} must have at least k_max={k_max} elements, got {g.size}")
        if not g.flags.writeable:
            raise ValueError(f"{name} must be writeable")
    if np.shares_memory(g1, g2):
        raise ValueError("g1 and g2 must not share memory")


def bound_derivative(bound, delta_t: float, k_max: int, out: np.ndarray | None = None) -> np.ndarray:
    """Forward-difference derivative of a boundary schedule.

    out[k] = (bound[k+1] - bound[k]) / delta_t for k < k_max - 1. The last grid
    point has no right neighbour, so it repeats the derivative of the
    second-to-last point. A single-point grid gets derivative 0.
    """
    delta_t, k_max = check_grid(delta_t, k_max)
    b = as_schedule("bound", bound, k_max)
    if out is None:
        out = np.empty(k_max, dtype=float)
    if k_max == 1:
        out[0] = 0.0
        return out
    np.subtract(b[1:], b[:-1], out=out[:-1])
    out[:-1] /= delta_t
    out[-1] = out[-2]
    return out


def extend_vector(v, new_size: int, fill: float) -> np.ndarray | None:
    """Copy `v` into a new array of length `new_size`.

    The copy is truncated when `v` is longer than `new_size` and padded with
    `fill` when it is shorter. Returns None if the new array cannot be allocated.
    """
    new_size = int(new_size)
    if new_size < 0:
        raise ValueError("new_size must be >= 0")
    v = np.asarray(v, dtype=float).reshape((-1,))
    try:
        new_v = np.empty(new_size, dtype=float)
    except MemoryError:
        _logger.warning("extend_vector: failed to allocate %d elements", new_size)
        return None
    n = min(v.size, new_size)
    new_v[:n] = v[:n]
    new_v[n:] = fill
    return new_v


def mass_normalize(g1: np.ndarray, g2: np.ndarray, delta_t: float, n: int | None = None) -> None:
    """Make (sum(g1) + sum(g2)) * delta_t equal one, in place.

    Negative elements are set to zero first. Missing mass is then added to the
    last elements of g1 / g2 such that the ratio p = sum(g1) / (sum(g1) + sum(g2))
    stays unchanged. If the pair already carries more than unit mass, both
    sequences are scaled down instead, which keeps them non-negative.
    """
    delta_t = float(delta_t)
    if not delta_t > 0.0:
        raise ValueError("delta_t must be > 0")
    if n is None:
        if g1.size != g2.size:
            raise ValueError("g1 and g2 must have the same length unless n is given")
        n = g1.size
    else:
        n = int(n)
    if n <= 0 or n > g1.size or n > g2.size:
        raise ValueError("n must be in [1, len(g)]")
    g1v = g1[:n]
    g2v = g2[:n]
    np.maximum(g1v, 0.0, out=g1v)
    np.maximum(g2v, 0.0, out=g2v)

    g1_sum = float(np.sum(g1v))
    g2_sum = float(np.sum(g2v))
    total = g1_sum + g2_sum
    if total <= 0.0:
        _logger.warning("mass_normalize: densities carry no mass, leaving them at zero")
        return

    mass = total * delta_t
    _logger.debug("mass_normalize: renormalizing mass from %g to 1", mass)
    if mass > 1.0:
        g1v /= mass
        g2v /= mass
        return
    p = g1_sum / total
    g1v[-1] += p / delta_t - g1_sum
    g2v[-1] += (1.0 - p) / delta_t - g2_sum
