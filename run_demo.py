"""Small runnable demo for the ddm_fpt solvers."""

import numpy as np
from ddm_fpt import fpt, fpt_const, fpt_sym_bound, fpt_weighted, mass_normalize


def main() -> None:
    # Time grid
    dt = 0.005
    t_max = 3.0

    # Constant drift, unit variance, bounds +-1
    closed = fpt_const(1.0, 1.0, dt, t_max)
    print("Closed form:      mass=%.6f  P(upper)=%.6f" % (closed.mass, closed.p_upper))

    # Same problem through the general recursion
    rec = fpt(1.0, 1.0, -1.0, 1.0, dt, t_max)
    print("Recursion:        mass=%.6f  max|diff|=%.2e" % (rec.mass, np.max(np.abs(rec.g1 - closed.g1))))

    # Time-varying drift (onset after 200 ms) and collapsing bounds
    t = closed.t
    mu = np.where(t < 0.2, 0.0, 1.5)
    bound = 1.5 * np.exp(-0.4 * t)
    collapse = fpt_sym_bound(mu, bound, dt, t_max)
    print("Collapsing bound: mass=%.6f  P(upper)=%.6f" % (collapse.mass, collapse.p_upper))

    # Leaky integration, asymmetric bounds
    leak = fpt(1.0, 1.0, -0.8, 1.2, dt, t_max, inv_leak=0.5)
    print("Leaky:            mass=%.6f  P(upper)=%.6f" % (leak.mass, leak.p_upper))

    # Evidence weighted by its own reliability
    weighted = fpt_weighted(mu + 0.5, 1.0, 1.0, dt, t_max)
    print("Weighted:         mass=%.6f  P(upper)=%.6f" % (weighted.mass, weighted.p_upper))

    # Densities truncated at t_max can be patched to unit mass
    g1 = weighted.g1.copy()
    g2 = weighted.g2.copy()
    mass_normalize(g1, g2, dt)
    print("Normalized:       mass=%.6f" % ((g1.sum() + g2.sum()) * dt))


if __name__ == "__main__":
    main()
