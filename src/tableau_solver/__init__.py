"""Tableau Solver: simplex tableaus with a replayable pivot trace."""

from .lp import simplex_solve, solve_text
from .schemas import SimplexResult, SolveOptions

__all__ = ["simplex_solve", "solve_text", "SimplexResult", "SolveOptions"]
