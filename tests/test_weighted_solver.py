import math

import numpy as np
import pytest

from ddm_fpt import SolverStatus, const_bound_density, solve_fpt_weighted

DELTA_T = 0.01
K_MAX = 300


@pytest.mark.parametrize(
    "mu,k,bound,ref_mu,ref_bound",
    [
        # a(t) = m, drift k m^2, variance m^2  <=>  unit variance, drift k m, bound / m
        (1.0, 1.0, 1.0, 1.0, 1.0),
        (2.0, 0.5, 2.0, 1.0, 1.0),
    ],
)
def test_matches_closed_form_for_constant_input(mu, k, bound, ref_mu, ref_bound) -> None:
    g1 = np.empty(K_MAX)
    g2 = np.empty(K_MAX)
    status = solve_fpt_weighted(np.full(K_MAX, mu), np.full(K_MAX, bound), k, DELTA_T, K_MAX, g1, g2)
    assert status == SolverStatus.SUCCESS
    g1c = np.empty(K_MAX)
    g2c = np.empty(K_MAX)
    const_bound_density(ref_mu, ref_bound, DELTA_T, K_MAX, g1c, g2c)
    np.testing.assert_allclose(g1, g1c, rtol=1e-4, atol=1e-8)
    np.testing.assert_allclose(g2, g2c, rtol=1e-4, atol=1e-8)


def test_lower_density_is_exact_reflection() -> None:
    t = DELTA_T * np.arange(1, K_MAX + 1)
    mu = 0.8 + 0.3 * np.cos(4.0 * t)
    bound = 1.3 - 0.25 * t
    k = 0.9
    g1 = np.empty(K_MAX)
    g2 = np.empty(K_MAX)
    solve_fpt_weighted(mu, bound, k, DELTA_T, K_MAX, g1, g2)
    assert np.all(g1 >= 0.0) and np.all(g2 >= 0.0)
    for n in range(K_MAX):
        assert g2[n] == g1[n] * math.exp(-2.0 * k * bound[n])
