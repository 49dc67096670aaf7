import numpy as np
from typing import List, Tuple

from ..schemas import LPProblem, Solution


def variable_list(problem: LPProblem) -> List[str]:
    names = set(problem.objective)
    for cons in problem.constraints:
        names.update(cons.expression)
    return sorted(names)


def slack_names(num_constraints: int) -> List[str]:
    return [f"s{i + 1}" for i in range(num_constraints)]


def build_tableau(problem: LPProblem) -> Tuple[np.ndarray, List[str], List[str], List[str]]:
    """
    Lay out the initial simplex tableau.

    Rows are the constraints followed by the objective (Z) row; columns are the
    decision variables in sorted order, one slack per constraint, then the RHS.
    The objective row holds the negated objective so that maximizing means
    driving every entry of that row to >= 0.
    Returns the tableau, the decision variable list, every column name
    (decision + slack) and the initial basic variables.
    """

    decision = variable_list(problem)
    m = len(problem.constraints)
    n = len(decision)

    tableau = np.zeros((m + 1, n + m + 1), dtype=float)
    for i, cons in enumerate(problem.constraints):
        for j, name in enumerate(decision):
            tableau[i, j] = cons.expression.get(name, 0.0)
        tableau[i, n + i] = 1.0
        tableau[i, -1] = cons.rhs

    for j, name in enumerate(decision):
        tableau[m, j] = -problem.objective.get(name, 0.0)

    slacks = slack_names(m)
    basic_vars = slacks + ["Z"]
    return tableau, decision, decision + slacks, basic_vars


def extract_solution(tableau: np.ndarray, basic_vars: List[str], decision: List[str]) -> Solution:
    values = {}
    for name in decision:
        value = 0.0
        if name in basic_vars:
            value = float(tableau[basic_vars.index(name), -1])
        values[name] = value
    return Solution(values=values, z=float(tableau[-1, -1]))
