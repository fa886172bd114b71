"""Solvers must fail cleanly when scratch memory is unavailable."""

import gc
import weakref

import numpy as np
import pytest

import ddm_fpt.scratch as scratch
from ddm_fpt import (
    SolverStatus,
    solve_fpt,
    solve_fpt_const_mu,
    solve_fpt_leak,
    solve_fpt_sym_bound,
    solve_fpt_weighted,
)

K_MAX = 50
DELTA_T = 0.01
SENTINEL = -7.0


def _ones(value=1.0):
    return np.full(K_MAX, value)


def _full(g1, g2):
    return solve_fpt(_ones(), _ones(), _ones(-1.0), _ones(), _ones(0.0), _ones(0.0), DELTA_T, K_MAX, g1, g2)


def _leak(g1, g2):
    return solve_fpt_leak(_ones(), _ones(), _ones(-1.0), _ones(), _ones(0.0), _ones(0.0), 0.5, DELTA_T, K_MAX, g1, g2)


def _sym_bound(g1, g2):
    return solve_fpt_sym_bound(_ones(), _ones(), DELTA_T, K_MAX, g1, g2)


def _const_mu(g1, g2):
    return solve_fpt_const_mu(1.0, _ones(), DELTA_T, K_MAX, g1, g2)


def _weighted(g1, g2):
    return solve_fpt_weighted(_ones(), _ones(), 1.0, DELTA_T, K_MAX, g1, g2)


SOLVERS = [(_full, 12), (_leak, 16), (_sym_bound, 14), (_const_mu, 13), (_weighted, 13)]
CASES = [(solver, n_ok) for solver, count in SOLVERS for n_ok in range(count)]


class _FailingFactory:
    """Stand-in for np.empty that raises MemoryError after `n_ok` calls."""

    def __init__(self, n_ok: int):
        self.n_ok = n_ok
        self.refs = []

    def __call__(self, shape, dtype=float):
        if len(self.refs) >= self.n_ok:
            raise MemoryError("simulated allocation failure")
        arr = np.empty(shape, dtype=dtype)
        self.refs.append(weakref.ref(arr))
        return arr


@pytest.mark.parametrize("solver,n_ok", CASES, ids=lambda c: getattr(c, "__name__", str(c)))
def test_failed_allocation_leaves_outputs_untouched(monkeypatch, solver, n_ok) -> None:
    factory = _FailingFactory(n_ok)
    monkeypatch.setattr(scratch, "_new_array", factory)
    g1 = np.full(K_MAX, SENTINEL)
    g2 = np.full(K_MAX, SENTINEL)

    status = solver(g1, g2)

    assert status == SolverStatus.ALLOCATION_FAILED
    assert np.all(g1 == SENTINEL)
    assert np.all(g2 == SENTINEL)
    assert len(factory.refs) == n_ok
    gc.collect()
    assert all(ref() is None for ref in factory.refs)


@pytest.mark.parametrize("solver,count", SOLVERS, ids=lambda c: getattr(c, "__name__", str(c)))
def test_solver_uses_exactly_its_scratch_arrays(monkeypatch, solver, count) -> None:
    factory = _FailingFactory(count)
    monkeypatch.setattr(scratch, "_new_array", factory)
    g1 = np.full(K_MAX, SENTINEL)
    g2 = np.full(K_MAX, SENTINEL)

    assert solver(g1, g2) == SolverStatus.SUCCESS
    assert len(factory.refs) == count
    assert np.all(g1 >= 0.0) and np.all(g2 >= 0.0)
    gc.collect()
    assert all(ref() is None for ref in factory.refs)


def test_allocation_failure_is_logged(monkeypatch, caplog) -> None:
    monkeypatch.setattr(scratch, "_new_array", _FailingFactory(1))
    with caplog.at_level("WARNING", logger="ddm_fpt.scratch"):
        assert scratch.allocate(10, 3) is None
    assert "failed after 1 of 3" in caplog.text


class _FailingExp:
    """Wraps np.exp and raises MemoryError once `n_ok` calls have succeeded."""

    def __init__(self, n_ok: int):
        self.n_ok = n_ok
        self.calls = 0
        self._exp = np.exp

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.calls > self.n_ok:
            raise MemoryError("simulated failure inside the sweep")
        return self._exp(*args, **kwargs)


@pytest.mark.parametrize("solver", [s for s, _ in SOLVERS], ids=lambda s: s.__name__)
def test_failure_during_sweep_leaves_outputs_untouched(monkeypatch, caplog, solver) -> None:
    failing = _FailingExp(n_ok=20)
    monkeypatch.setattr(np, "exp", failing)
    g1 = np.full(K_MAX, SENTINEL)
    g2 = np.full(K_MAX, SENTINEL)

    with caplog.at_level("WARNING"):
        status = solver(g1, g2)

    # the sweep was well under way when it failed
    assert failing.calls > 20
    assert status == SolverStatus.ALLOCATION_FAILED
    assert np.all(g1 == SENTINEL)
    assert np.all(g2 == SENTINEL)
    assert "out of memory during the sweep" in caplog.text
