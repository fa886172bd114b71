"""Solver exports."""

from .full import solve_fpt, solve_fpt_leak
from .bound import solve_fpt_const_mu, solve_fpt_sym_bound
from .weighted import solve_fpt_weighted

__all__ = [
    "solve_fpt",
    "solve_fpt_leak",
    "solve_fpt_sym_bound",
    "solve_fpt_const_mu",
    "solve_fpt_weighted",
]
