"""First-passage time densities of drift-diffusion models."""

from .closed_form import (
    asym_bound_density,
    asym_lo_density,
    asym_up_density,
    const_bound_density,
    sym_up_density,
)
from .engine import FPTDensity, fpt, fpt_const, fpt_sym_bound, fpt_weighted
from .numerics import SERIES_ACC, bound_derivative, extend_vector, mass_normalize
from .scratch import SolverStatus
from .series import (
    fast_series,
    long_time_series,
    short_time_series,
    sym_fast_series,
    sym_series,
    use_short_series,
)
from .solvers import (
    solve_fpt,
    solve_fpt_const_mu,
    solve_fpt_leak,
    solve_fpt_sym_bound,
    solve_fpt_weighted,
)

__all__ = [
    # Results
    "SolverStatus",
    "FPTDensity",
    # Front end
    "fpt",
    "fpt_const",
    "fpt_sym_bound",
    "fpt_weighted",
    # Solvers
    "solve_fpt",
    "solve_fpt_leak",
    "solve_fpt_sym_bound",
    "solve_fpt_const_mu",
    "solve_fpt_weighted",
    # Closed form
    "const_bound_density",
    "asym_bound_density",
    "sym_up_density",
    "asym_up_density",
    "asym_lo_density",
    # Series
    "use_short_series",
    "short_time_series",
    "long_time_series",
    "fast_series",
    "sym_series",
    "sym_fast_series",
    # Collaborators
    "SERIES_ACC",
    "bound_derivative",
    "extend_vector",
    "mass_normalize",
]
