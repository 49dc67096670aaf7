from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.optimize import linprog

from .formatting import format_number, solution_text
from ..schemas import (
    Constraint,
    ConstraintCheck,
    LinearExpression,
    LPProblem,
    ObjectiveCheck,
    SimplexResult,
    SolveOptions,
    VerificationReport,
)

# coefficients smaller than these are left out of the substitution text
_CONSTRAINT_TERM_EPS = 1e-9
_OBJECTIVE_TERM_EPS = 1e-12


def verify_solution(result: SimplexResult, opts: Optional[SolveOptions] = None) -> VerificationReport:
    """
    Substitute the optimal values back into every constraint and the objective.

    Each check keeps the substitution (``2(6) + 3(4)``) and the products
    (``12 + 12``) so the arithmetic can be shown line by line.
    Relations and the objective value are checked within ``opts.tol``.
    """

    if result.status != "optimal" or result.solution is None:
        raise ValueError(f"Cannot verify a {result.status} result: {result.message}")

    tol = (opts or SolveOptions()).tol

    values = result.solution.values
    decision = result.variable_list

    checks: List[ConstraintCheck] = []
    for idx, cons in enumerate(result.constraints):
        substitution, products, total = _substitute(cons.expression, values, decision, _CONSTRAINT_TERM_EPS)
        checks.append(
            ConstraintCheck(
                index=idx,
                relation=cons.relation,
                rhs=cons.rhs,
                substitution=substitution,
                products=products,
                total=total,
                satisfied=_holds(cons, total, tol),
            )
        )

    substitution, products, total = _substitute(result.objective, values, decision, _OBJECTIVE_TERM_EPS)
    objective = ObjectiveCheck(
        substitution=substitution,
        products=products,
        total=total,
        z=result.solution.z,
        satisfied=abs(total - result.solution.z) < tol,
    )

    return VerificationReport(
        solution_text=solution_text(result.solution, decision),
        constraints=checks,
        objective=objective,
    )


def _substitute(
    expression: LinearExpression,
    values: Dict[str, float],
    decision: Sequence[str],
    skip_below: float,
) -> Tuple[str, str, float]:
    mult_parts: List[str] = []
    sum_parts: List[str] = []
    total = 0.0
    for name in decision:
        coef = expression.get(name, 0.0)
        if abs(coef) < skip_below:
            continue
        value = values.get(name, 0.0)
        product = coef * value
        mult_parts.append(f"{format_number(coef)}({format_number(value)})")
        sum_parts.append(format_number(product))
        total += product
    return " + ".join(mult_parts), " + ".join(sum_parts), total


def _holds(cons: Constraint, total: float, tol: float) -> bool:
    if cons.relation == "<=":
        return total <= cons.rhs + tol
    if cons.relation == ">=":
        return total >= cons.rhs - tol
    return abs(total - cons.rhs) < tol


def cross_check(problem: LPProblem, result: SimplexResult, tol: float = 1e-6) -> Dict[str, Any]:
    """Solve the same maximization with SciPy's HiGHS and compare outcomes."""

    decision = sorted(set(problem.objective).union(*(cons.expression for cons in problem.constraints)))
    n = len(decision)
    c = np.array([-problem.objective.get(name, 0.0) for name in decision], dtype=float)

    A_ub: List[List[float]] = []
    b_ub: List[float] = []
    A_eq: List[List[float]] = []
    b_eq: List[float] = []
    for cons in problem.constraints:
        row = [cons.expression.get(name, 0.0) for name in decision]
        if cons.relation == "<=":
            A_ub.append(row)
            b_ub.append(cons.rhs)
        elif cons.relation == ">=":
            A_ub.append([-value for value in row])
            b_ub.append(-cons.rhs)
        else:
            A_eq.append(row)
            b_eq.append(cons.rhs)

    if n == 0:
        reference = {"status": "optimal", "objective_value": 0.0}
    else:
        res = linprog(
            c,
            A_ub=np.array(A_ub, dtype=float) if A_ub else None,
            b_ub=np.array(b_ub, dtype=float) if b_ub else None,
            A_eq=np.array(A_eq, dtype=float) if A_eq else None,
            b_eq=np.array(b_eq, dtype=float) if b_eq else None,
            bounds=[(0.0, None)] * n,
            method="highs",
        )
        reference = {
            "status": _map_status(res.status),
            "objective_value": float(-res.fun) if res.status == 0 else None,
        }

    if reference["status"] == "optimal" and result.status == "optimal" and result.solution is not None:
        agrees = abs(reference["objective_value"] - result.solution.z) <= tol * max(1.0, abs(result.solution.z))
    else:
        agrees = reference["status"] == result.status
    return {"reference": reference, "status": result.status, "agrees": agrees}


def _map_status(code: int) -> str:
    mapping = {
        0: "optimal",
        1: "iteration_limit",
        2: "infeasible",
        3: "unbounded",
    }
    return mapping.get(code, "iteration_limit")
