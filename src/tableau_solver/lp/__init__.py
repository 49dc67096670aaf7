"""Tableau simplex method with a step-by-step pivot trace."""

from .simplex import simplex_solve, solve_text
from .parser import parse_expression, build_problem, parse_problem_text
from .verification import verify_solution, cross_check

__all__ = [
    "simplex_solve",
    "solve_text",
    "parse_expression",
    "build_problem",
    "parse_problem_text",
    "verify_solution",
    "cross_check",
]
