import os
import sys

import numpy as np
import pytest


# Ensure repo root is on sys.path so tests can import the local `ddm_fpt` package
# regardless of pytest's import mode / rootdir heuristics.
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)


@pytest.fixture
def const_schedules():
    """Constant drift/variance/bound schedules for mu=1, sig2=1, bounds +-1, dt=0.01, 300 steps."""
    k_max = 300
    return {
        "mu": np.full(k_max, 1.0),
        "sig2": np.ones(k_max),
        "b_lo": np.full(k_max, -1.0),
        "b_up": np.full(k_max, 1.0),
        "b_lo_deriv": np.zeros(k_max),
        "b_up_deriv": np.zeros(k_max),
        "delta_t": 0.01,
        "k_max": k_max,
    }
