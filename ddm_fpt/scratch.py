"""Call-scoped scratch arrays and the solver result status."""

from __future__ import annotations

import logging
from enum import IntEnum

import numpy as np

_logger = logging.getLogger(__name__)

# Array factory used for all scratch memory (swapped out in tests).
_new_array = np.empty


class SolverStatus(IntEnum):
    """Result of a solver call; the densities are only written on SUCCESS."""

    SUCCESS = 0
    ALLOCATION_FAILED = -1


def allocate(k_max: int, count: int) -> list[np.ndarray] | None:
    """Allocate `count` float arrays of length `k_max`, all or nothing.

    If any allocation fails, the arrays acquired so far are dropped and None is
    returned, so callers can report failure without having touched any output.
    """
    arrays: list[np.ndarray] = []
    try:
        for _ in range(int(count)):
            arrays.append(_new_array(int(k_max), dtype=float))
    except MemoryError:
        n_ok = len(arrays)
        arrays.clear()
        _logger.warning("scratch allocation failed after %d of %d arrays (k_max=%d)", n_ok, count, k_max)
        return None
    return arrays
