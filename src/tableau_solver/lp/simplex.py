import logging
import numpy as np
from typing import Iterable, List, Optional, Tuple

from .formatting import elimination_text, pivot_row_text, ratio_text
from .parser import ConstraintRow, build_problem, reject_duplicates
from .tableau import build_tableau, extract_solution
from ..schemas import (
    CellOperation,
    IterationSnapshot,
    LPProblem,
    PivotOperations,
    RatioTest,
    RowOperations,
    SimplexResult,
    SolveOptions,
)

logger = logging.getLogger(__name__)

UNBOUNDED_MESSAGE = "Problem is unbounded - no positive values in pivot column"
ITERATION_LIMIT_MESSAGE = "Maximum iterations exceeded. The problem might be unbounded or infeasible."


def solve_text(
    objective_text: str,
    rows: Iterable[ConstraintRow],
    opts: Optional[SolveOptions] = None,
) -> SimplexResult:
    """Parse the raw objective/constraint text and run :func:`simplex_solve` on it."""
    opts = opts or SolveOptions()
    hook = reject_duplicates if opts.reject_duplicates else None
    problem = build_problem(objective_text, rows, on_duplicate=hook)
    return simplex_solve(problem, opts)


def simplex_solve(problem: LPProblem, opts: Optional[SolveOptions] = None) -> SimplexResult:
    """
    Maximize ``problem.objective`` with the tableau method and record every pivot.

    Only ``<=`` rows are modelled faithfully: ``>=`` and ``=`` rows get a slack like
    any other row and no feasibility phase is run, so their answer may be
    meaningless. Failures come back as a result with ``status`` set and an empty
    trace; call ``raise_for_status()`` to turn them into exceptions.
    """

    opts = opts or SolveOptions()
    tableau, decision, variables, basic_vars = build_tableau(problem)
    m = len(problem.constraints)

    warnings: List[str] = []
    unsupported = [idx + 1 for idx, cons in enumerate(problem.constraints) if cons.relation != "<="]
    if unsupported:
        message = (
            f"Constraints {unsupported} use '>=' or '='; they are solved without surplus or "
            "artificial variables and the result may not satisfy them."
        )
        logger.warning(message)
        warnings.append(message)

    def failure(status: str, message: str, iterations: int) -> SimplexResult:
        return SimplexResult(
            status=status,  # type: ignore[arg-type]
            message=message,
            trace=[],
            solution=None,
            variable_list=decision,
            constraints=list(problem.constraints),
            objective=dict(problem.objective),
            iterations=iterations,
            warnings=warnings,
        )

    trace: List[IterationSnapshot] = []
    iteration = 1

    while True:
        pivot_col = _select_pivot_column(tableau[m], opts)
        if pivot_col is None:
            break

        ratios, pivot_row = _ratio_test(tableau, pivot_col, basic_vars, variables, opts)
        if pivot_row is None:
            logger.debug("Column %s has no positive entry; unbounded.", variables[pivot_col])
            return failure("unbounded", UNBOUNDED_MESSAGE, iteration - 1)

        before = tableau.copy()
        pivot_value = float(before[pivot_row, pivot_col])
        logger.debug(
            "Iteration %d: %s enters, %s leaves, pivot %g.",
            iteration,
            variables[pivot_col],
            basic_vars[pivot_row],
            pivot_value,
        )

        _pivot(tableau, pivot_row, pivot_col)
        operations = _pivot_operations(before, tableau, pivot_row, pivot_col, basic_vars)

        trace.append(
            IterationSnapshot(
                number=iteration,
                basic_vars=list(basic_vars),
                variables=list(variables),
                matrix=before.tolist(),
                ratios=ratios,
                pivot_col=pivot_col,
                pivot_row=pivot_row,
                pivot_value=pivot_value,
                pivot_operations=operations,
            )
        )

        basic_vars[pivot_row] = variables[pivot_col]
        iteration += 1

        if iteration > opts.max_iters:
            logger.debug("Stopped after %d pivots without reaching optimality.", iteration - 1)
            return failure("iteration_limit", ITERATION_LIMIT_MESSAGE, iteration - 1)

    trace.append(
        IterationSnapshot(
            number=iteration,
            basic_vars=list(basic_vars),
            variables=list(variables),
            matrix=tableau.tolist(),
        )
    )

    solution = extract_solution(tableau, basic_vars, decision)
    logger.debug("Optimal after %d pivots: %s", iteration - 1, solution)
    return SimplexResult(
        status="optimal",
        trace=trace,
        solution=solution,
        variable_list=decision,
        constraints=list(problem.constraints),
        objective=dict(problem.objective),
        iterations=iteration - 1,
        warnings=warnings,
    )


def _select_pivot_column(objective_row: np.ndarray, opts: SolveOptions) -> Optional[int]:
    # the RHS cell is never a candidate
    if opts.pivot_rule == "bland":
        for j in range(len(objective_row) - 1):
            if objective_row[j] < 0:
                return j
        return None

    pivot_col = None
    most_negative = 0.0
    for j in range(len(objective_row) - 1):
        if objective_row[j] < most_negative:
            most_negative = objective_row[j]
            pivot_col = j
    return pivot_col


def _ratio_test(
    tableau: np.ndarray,
    pivot_col: int,
    basic_vars: List[str],
    variables: List[str],
    opts: SolveOptions,
) -> Tuple[List[Optional[RatioTest]], Optional[int]]:
    m = tableau.shape[0] - 1
    values: List[Optional[Tuple[float, float, float]]] = []
    pivot_row = None
    min_ratio = np.inf

    for i in range(m):
        entry = float(tableau[i, pivot_col])
        if entry <= 0:
            values.append(None)
            continue
        rhs = float(tableau[i, -1])
        ratio = rhs / entry
        values.append((rhs, entry, ratio))
        if ratio < min_ratio:
            min_ratio = ratio
            pivot_row = i
        elif opts.pivot_rule == "bland" and ratio == min_ratio and pivot_row is not None:
            if variables.index(basic_vars[i]) < variables.index(basic_vars[pivot_row]):
                pivot_row = i

    ratios: List[Optional[RatioTest]] = []
    for i, item in enumerate(values):
        if item is None:
            ratios.append(None)
            continue
        rhs, entry, ratio = item
        ratios.append(
            RatioTest(rhs=rhs, entry=entry, value=ratio, text=ratio_text(rhs, entry, ratio), is_min=i == pivot_row)
        )
    ratios.append(None)  # objective row
    return ratios, pivot_row


def _pivot(tableau: np.ndarray, pivot_row: int, pivot_col: int) -> None:
    """Gauss-Jordan step in place: normalize the pivot row, clear the column elsewhere."""
    tableau[pivot_row] = tableau[pivot_row] / tableau[pivot_row, pivot_col]
    for i in range(tableau.shape[0]):
        if i == pivot_row:
            continue
        factor = tableau[i, pivot_col]
        tableau[i] = tableau[i] - factor * tableau[pivot_row]


def _pivot_operations(
    before: np.ndarray,
    after: np.ndarray,
    pivot_row: int,
    pivot_col: int,
    basic_vars: List[str],
) -> PivotOperations:
    pivot_value = float(before[pivot_row, pivot_col])
    normalized = after[pivot_row]

    pivot_ops = [
        CellOperation(
            old=float(old),
            operand=pivot_value,
            result=float(new),
            text=pivot_row_text(float(old), pivot_value, float(new)),
        )
        for old, new in zip(before[pivot_row], normalized)
    ]

    other_rows: List[RowOperations] = []
    for i in range(before.shape[0]):
        if i == pivot_row:
            continue
        factor = float(before[i, pivot_col])
        cells = []
        for old, norm, new in zip(before[i], normalized, after[i]):
            cells.append(
                CellOperation(
                    old=float(old),
                    operand=float(norm),
                    factor=factor,
                    result=float(new),
                    text=elimination_text(float(old), float(norm), factor, float(new)),
                )
            )
        other_rows.append(RowOperations(row_name=basic_vars[i], operations=cells))

    return PivotOperations(pivot_row=pivot_ops, other_rows=other_rows)
