"""Benchmark: wall time of the FPT solvers on a common grid.

Run examples:
    python tools/bench_solvers.py
    python tools/bench_solvers.py --dt 0.001 --t-max 3 --reps 3

All solvers use constant drift 1, unit variance and bounds +-1, so the
closed form serves as the accuracy reference in the last column.
"""

from __future__ import annotations

import argparse
import os
import sys
import time

import numpy as np

_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)


def _time_once(fn):
    t0 = time.perf_counter()
    out = fn()
    return float(time.perf_counter() - t0), out


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--reps", type=int, default=5)
    ap.add_argument("--dt", type=float, default=0.005)
    ap.add_argument("--t-max", type=float, default=3.0)
    args = ap.parse_args()

    from ddm_fpt import fpt, fpt_const, fpt_sym_bound, fpt_weighted

    dt = float(args.dt)
    t_max = float(args.t_max)
    ones = np.ones(int(round(t_max / dt)))
    ref = fpt_const(1.0, 1.0, dt, t_max)

    cases = {
        "closed form": lambda: fpt_const(1.0, 1.0, dt, t_max),
        "general": lambda: fpt(1.0, 1.0, -1.0, 1.0, dt, t_max),
        "general + leak": lambda: fpt(1.0, 1.0, -1.0, 1.0, dt, t_max, inv_leak=1e-12),
        "symmetric bound": lambda: fpt_sym_bound(ones, 1.0, dt, t_max),
        "constant drift": lambda: fpt_sym_bound(1.0, 1.0, dt, t_max),
        "weighted": lambda: fpt_weighted(1.0, 1.0, 1.0, dt, t_max),
    }

    print(f"dt={dt:g} t_max={t_max:g} k_max={ref.g1.size} reps={args.reps}")
    for name, fn in cases.items():
        _ = fn()
        times = []
        for _ in range(int(args.reps)):
            elapsed, res = _time_once(fn)
            times.append(elapsed)
        times = np.asarray(times, dtype=float)
        err = float(np.max(np.abs(res.g1 - ref.g1)))
        print(f"{name:<16s} avg={times.mean():.6f}s  min={times.min():.6f}s  max|g1-ref|={err:.3e}")


if __name__ == "__main__":
    main()
