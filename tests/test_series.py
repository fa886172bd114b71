import logging
import math

import numpy as np
import pytest

from ddm_fpt import (
    SERIES_ACC,
    fast_series,
    long_time_series,
    short_time_series,
    sym_fast_series,
    use_short_series,
)


def _navarro_fuss_eq13(t: float, tol: float) -> bool:
    pi = math.pi
    ks = 2.0 + math.sqrt(-2.0 * t * math.log(2.0 * tol * math.sqrt(2.0 * pi * t)))
    kl = math.sqrt(-2.0 * math.log(pi * t * tol) / (t * (pi * pi)))
    return ks < kl


def test_fast_series_is_zero_at_t0() -> None:
    assert fast_series(0.0, 0.3, SERIES_ACC) == 0.0
    assert fast_series(0.0, 0.5, SERIES_ACC) == 0.0
    assert sym_fast_series(0.0, SERIES_ACC) == 0.0


def test_series_choice_matches_literal_inequality() -> None:
    ts = np.logspace(-6, 1, 300)
    picks = [use_short_series(float(t), SERIES_ACC) for t in ts]
    assert picks == [_navarro_fuss_eq13(float(t), SERIES_ACC) for t in ts]
    # both regimes occur in this range
    assert any(picks) and not all(picks)


def test_series_choice_outside_domain_uses_long_series() -> None:
    assert use_short_series(1.0, 0.0) is False
    assert use_short_series(1.0, 1.0) is False
    assert use_short_series(-1.0, SERIES_ACC) is False


def test_series_converge_without_hitting_cap(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="ddm_fpt.series"):
        for t in np.logspace(-6, 1, 200):
            for w in (0.05, 0.3, 0.5, 0.9):
                f = fast_series(float(t), w, SERIES_ACC)
                assert np.isfinite(f) and f >= 0.0
            f = sym_fast_series(float(t), SERIES_ACC)
            assert np.isfinite(f) and f >= 0.0
    assert not caplog.records


def test_short_and_long_series_agree() -> None:
    for t, w in [(0.1, 0.3), (0.2, 0.5), (0.15, 0.8)]:
        short = short_time_series(t, w, SERIES_ACC)
        long = long_time_series(t, w, SERIES_ACC)
        assert short == pytest.approx(long, rel=1e-10)


def test_symmetric_series_matches_midpoint_start() -> None:
    for t in (1e-3, 0.05, 0.3, 1.0, 3.0):
        assert sym_fast_series(t, SERIES_ACC) == pytest.approx(fast_series(t, 0.5, SERIES_ACC), rel=1e-12)


def test_non_positive_tolerance_terminates_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="ddm_fpt.series"):
        f = fast_series(0.5, 0.4, 0.0, max_terms=50)
        g = sym_fast_series(0.5, -1.0, max_terms=50)
    assert np.isfinite(f) and np.isfinite(g)
    assert len(caplog.records) == 2
    assert all("not converged" in r.getMessage() for r in caplog.records)


def test_series_reject_negative_time() -> None:
    with pytest.raises(ValueError):
        fast_series(-0.1, 0.5, SERIES_ACC)
    with pytest.raises(ValueError):
        short_time_series(0.0, 0.5, SERIES_ACC)


@pytest.mark.parametrize("t,tol", [(1e-300, SERIES_ACC), (1e-30, 1e-300)])
def test_underflowing_time_term_selects_short_series(t: float, tol: float) -> None:
    # pi * t * tol underflows to zero, so the long-series term count is infinite
    assert math.pi * t * tol == 0.0
    assert use_short_series(t, tol) is True
    f = fast_series(t, 0.5, tol)
    g = sym_fast_series(t, tol)
    assert f == 0.0 and g == 0.0
    assert short_time_series(t, 0.3, tol) == 0.0
