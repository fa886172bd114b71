import math

import numpy as np
import pytest
from scipy.stats import invgauss

from ddm_fpt import SolverStatus, asym_bound_density, const_bound_density


def _const(mu, bound, delta_t, k_max):
    g1 = np.empty(k_max)
    g2 = np.empty(k_max)
    status = const_bound_density(mu, bound, delta_t, k_max, g1, g2)
    assert status == SolverStatus.SUCCESS
    return g1, g2


@pytest.mark.parametrize("mu,bound", [(1.0, 1.0), (2.0, 0.5), (0.5, 1.5)])
def test_mass_and_choice_probability(mu: float, bound: float) -> None:
    delta_t = 0.005
    g1, g2 = _const(mu, bound, delta_t, 4000)
    assert np.all(g1 >= 0.0) and np.all(g2 >= 0.0)
    assert abs((g1.sum() + g2.sum()) * delta_t - 1.0) < 1e-3
    # P(upper first) for symmetric bounds and constant drift
    p_upper = 1.0 / (1.0 + math.exp(-2.0 * mu * bound))
    assert abs(g1.sum() * delta_t - p_upper) < 1e-3


def test_lower_density_is_reflection_of_upper() -> None:
    mu, bound = 0.8, 1.2
    g1, g2 = _const(mu, bound, 0.01, 200)
    np.testing.assert_array_equal(g2, math.exp(-2.0 * (mu * bound)) * g1)


def test_asymmetric_matches_symmetric_for_symmetric_bounds() -> None:
    k_max = 250
    g1s, g2s = _const(1.3, 0.9, 0.01, k_max)
    g1 = np.empty(k_max)
    g2 = np.empty(k_max)
    assert asym_bound_density(1.3, 0.9, -0.9, 0.01, k_max, g1, g2) == SolverStatus.SUCCESS
    np.testing.assert_allclose(g1, g1s, rtol=1e-10, atol=1e-300)
    np.testing.assert_allclose(g2, g2s, rtol=1e-10, atol=1e-300)


def test_far_lower_bound_gives_inverse_gaussian() -> None:
    # drift 1, upper bound 1: hitting time ~ IG(mean=1, shape=1)
    delta_t = 0.01
    k_max = 500
    g1 = np.empty(k_max)
    g2 = np.empty(k_max)
    asym_bound_density(1.0, 1.0, -20.0, delta_t, k_max, g1, g2)
    t = delta_t * np.arange(1, k_max + 1)
    ref = invgauss.pdf(t, 1.0)
    np.testing.assert_allclose(g1, ref, rtol=1e-8, atol=1e-12)
    assert g2.sum() * delta_t < 1e-10


def test_negative_drift_in_asymmetric_case() -> None:
    k_max = 300
    g1 = np.empty(k_max)
    g2 = np.empty(k_max)
    asym_bound_density(-1.0, 1.0, -1.0, 0.01, k_max, g1, g2)
    # mirror image of mu = +1
    g1p, g2p = _const(1.0, 1.0, 0.01, k_max)
    np.testing.assert_allclose(g1, g2p, rtol=1e-10, atol=1e-300)
    np.testing.assert_allclose(g2, g1p, rtol=1e-10, atol=1e-300)


def test_preconditions() -> None:
    g1 = np.empty(10)
    g2 = np.empty(10)
    with pytest.raises(ValueError):
        const_bound_density(0.0, 1.0, 0.01, 10, g1, g2)
    with pytest.raises(ValueError):
        const_bound_density(1.0, -1.0, 0.01, 10, g1, g2)
    with pytest.raises(ValueError):
        const_bound_density(1.0, 1.0, 0.0, 10, g1, g2)
    with pytest.raises(ValueError):
        const_bound_density(1.0, 1.0, 0.01, 0, g1, g2)
    with pytest.raises(ValueError):
        const_bound_density(1.0, 1.0, 0.01, 20, g1, g2)
    with pytest.raises(ValueError):
        asym_bound_density(1.0, 1.0, 0.5, 0.01, 10, g1, g2)
