"""Pure text rendering for tableaus, ratio tests and elimination steps."""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from ..schemas import Constraint, IterationSnapshot, LinearExpression, Solution

_COMMON_FRACTIONS = {
    0.5: "1/2",
    -0.5: "-1/2",
    0.25: "1/4",
    -0.25: "-1/4",
    0.75: "3/4",
    -0.75: "-3/4",
    1.5: "3/2",
    -1.5: "-3/2",
    0.3333333333: "1/3",
    -0.3333333333: "-1/3",
    0.6666666667: "2/3",
    -0.6666666667: "-2/3",
    0.2: "1/5",
    -0.2: "-1/5",
    0.1666666667: "1/6",
    -0.1666666667: "-1/6",
}


def approximate_fraction(value: float, max_denominator: int = 24, tol: float = 0.005) -> Optional[Tuple[int, int, str]]:
    """Best ``num/den`` with ``den <= max_denominator`` within ``tol`` of ``value``, else ``None``."""
    if not math.isfinite(value):
        return None
    sign = -1 if value < 0 else 1
    v = abs(value)

    best_num, best_den, best_err = 0, 1, v
    for den in range(1, max_denominator + 1):
        num = math.floor(v * den + 0.5)
        err = abs(v - num / den)
        if err < best_err:
            best_num, best_den, best_err = num, den, err

    if best_err > tol:
        return None
    num = best_num * sign
    if best_den == 1:
        return num, 1, str(num)
    return num, best_den, f"{num}/{best_den}"


def format_number(num: float) -> str:
    """Short human form of a tableau value: ``0``, ``3/2``, ``-1/3``, ``13.800``..."""
    if not math.isfinite(num):
        return str(num)
    if abs(num) < 1e-12:
        return "0"
    if num == 1:
        return "1"
    if num == -1:
        return "-1"

    for key, text in _COMMON_FRACTIONS.items():
        if abs(num - key) < 0.005:
            return text

    approx = approximate_fraction(num, 24, 0.006)
    if approx is not None:
        return approx[2]

    if float(num).is_integer():
        return str(int(num))
    return f"{num:.3f}"


def ratio_text(rhs: float, entry: float, ratio: float) -> str:
    return f"{format_number(rhs)} ÷ {format_number(entry)} = {format_number(ratio)}"


def pivot_row_text(old: float, pivot: float, new: float) -> str:
    return f"{format_number(old)}(1/{format_number(pivot)}) = {format_number(new)}"


def elimination_text(old: float, normalized: float, factor: float, new: float) -> str:
    return f"{format_number(old)} - {format_number(normalized)}({format_number(factor)}) = {format_number(new)}"


def format_terms(expression: LinearExpression, order: Optional[Iterable[str]] = None, tol: float = 1e-9) -> str:
    """Render ``{"x": 2, "y": -1.5}`` as ``2x - 3/2y``; zero terms are skipped."""
    names = list(order) if order is not None else list(expression)
    parts: List[str] = []
    for name in names:
        coef = expression.get(name, 0.0)
        if abs(coef) < tol:
            continue
        magnitude = "" if abs(coef) == 1 else format_number(abs(coef))
        if not parts:
            parts.append(f"{'-' if coef < 0 else ''}{magnitude}{name}")
        else:
            parts.append(f"{'-' if coef < 0 else '+'} {magnitude}{name}")
    return " ".join(parts) if parts else "0"


def solution_text(solution: Solution, decision: Sequence[str]) -> str:
    parts = [f"{name} = {format_number(solution.values.get(name, 0.0))}" for name in decision]
    parts.append(f"Z = {format_number(solution.z)}")
    return ", ".join(parts)


def render_lp_model(objective: LinearExpression, constraints: Sequence[Constraint], decision: Sequence[str]) -> List[str]:
    """Original model next to its canonical (slack) form, one line per row."""
    lines: List[str] = []
    objective_terms = format_terms(objective, decision)
    negated = format_terms({name: -coef for name, coef in objective.items()}, decision)
    if negated == "0":
        lines.append(f"Z = {objective_terms} --> Z = 0")
    elif negated.startswith("-"):
        lines.append(f"Z = {objective_terms} --> Z - {negated[1:]} = 0")
    else:
        lines.append(f"Z = {objective_terms} --> Z + {negated} = 0")

    for idx, cons in enumerate(constraints):
        lhs = format_terms(cons.expression, decision)
        canonical = f"{lhs} + s{idx + 1}" if lhs != "0" else f"s{idx + 1}"
        lines.append(f"{lhs} {cons.relation} {format_number(cons.rhs)} --> {canonical} = {format_number(cons.rhs)}")

    names = ", ".join(decision)
    slacks = ", ".join(f"s{idx + 1}" for idx in range(len(constraints)))
    everything = f"{names}, {slacks}" if names and slacks else names or slacks
    lines.append(f"{names} >= 0 --> {everything} >= 0")
    return lines


def render_snapshot(snapshot: IterationSnapshot) -> str:
    """Plain-text table of one snapshot followed by its pivot summary."""
    header = ["Basic", *snapshot.variables, "RHS"]
    show_ratios = bool(snapshot.ratios)
    if show_ratios:
        header.append("Ratio")

    rows: List[List[str]] = []
    for idx, values in enumerate(snapshot.matrix):
        cells = [snapshot.basic_vars[idx], *(format_number(value) for value in values)]
        if show_ratios:
            ratio = snapshot.ratios[idx] if idx < len(snapshot.ratios) else None
            if ratio is None:
                cells.append("")
            else:
                cells.append(ratio.text + ("  <- smallest ratio" if ratio.is_min else ""))
        rows.append(cells)

    widths = [max(len(row[col]) for row in [header, *rows]) for col in range(len(header))]
    lines = [f"Tableau {snapshot.number}", "  " + "  ".join(cell.ljust(w) for cell, w in zip(header, widths)).rstrip()]
    for idx, cells in enumerate(rows):
        # pivot row is starred
        marker = "*" if idx == snapshot.pivot_row else " "
        lines.append(marker + " " + "  ".join(cell.ljust(w) for cell, w in zip(cells, widths)).rstrip())

    if not snapshot.is_final:
        lines.append(f"Pivot column: {snapshot.entering} (most negative in Z-row)")
        lines.append(f"Pivot row: {snapshot.leaving} (smallest positive ratio)")
        lines.append(f"Pivot element: {format_number(snapshot.pivot_value)}")
    return "\n".join(lines)
