import logging
import re
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..schemas import Constraint, ConstraintInput, LinearExpression, LPProblem, Relation
from .errors import DuplicateTermError

logger = logging.getLogger(__name__)

DuplicateHook = Callable[[str, float, float], None]
ConstraintRow = Union[ConstraintInput, Tuple[str, str, Union[str, float]]]

_TERM_PATTERN = re.compile(r"([+-]?\s*\d*\.?\d*)\s*([a-zA-Z])")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RELATIONS = {
    "<=": "<=",
    "=<": "<=",
    "≤": "<=",
    ">=": ">=",
    "=>": ">=",
    "≥": ">=",
    "=": "=",
    "==": "=",
}
_TOKEN_SPLIT = re.compile(r",|;|\band\b", re.IGNORECASE)
_COMPARATOR = re.compile(r"(<=|>=|==|=|≤|≥)")
_BARE_VARIABLE = re.compile(r"^[A-Za-z]$")
_NON_NEGATIVITY = re.compile(r"^[A-Za-z]\s*(?:>=|≥)\s*0+(?:\.0*)?$")


def parse_expression(expression: str, on_duplicate: Optional[DuplicateHook] = None) -> LinearExpression:
    """
    Turn text such as ``"1.5x + 1.2y"`` or ``"-2a+b"`` into ``{symbol: coefficient}``.

    Every letter is its own variable. A repeated variable keeps the last coefficient;
    pass ``on_duplicate`` (called with symbol, previous, new) to observe or reject that.
    Text without any term parses to an empty mapping.
    """

    expr = expression.strip()
    if not expr.startswith("-") and not expr.startswith("+"):
        expr = "+" + expr

    terms: LinearExpression = {}
    for match in _TERM_PATTERN.finditer(expr):
        coef_text = re.sub(r"\s", "", match.group(1))
        var_name = match.group(2)
        coef = _coefficient(coef_text)
        if var_name in terms and on_duplicate is not None:
            on_duplicate(var_name, terms[var_name], coef)
        terms[var_name] = coef
    return terms


def _coefficient(text: str) -> float:
    # a lone "." carries no digits and counts as a missing numeral
    digits = text.lstrip("+-")
    if digits in ("", "."):
        return -1.0 if text.startswith("-") else 1.0
    return float(text)


def reject_duplicates(var_name: str, previous: float, new: float) -> None:
    """Strict post-parse hook: refuse expressions that mention a variable twice."""
    raise DuplicateTermError(
        f"Variable '{var_name}' appears more than once (coefficients {previous:g} and {new:g})."
    )


def parse_rhs(value: Union[str, float, None]) -> Optional[float]:
    """Read the leading number of ``value``; ``None`` when there is none."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if number != number else number
    match = _LEADING_FLOAT.match(value)
    if not match:
        return None
    return float(match.group(0))


def normalize_relation(symbol: str) -> Relation:
    relation = _RELATIONS.get(symbol.strip())
    if relation is None:
        raise ValueError(f"Unknown relation '{symbol}'; expected one of <=, >=, =.")
    return relation  # type: ignore[return-value]


def build_problem(
    objective_text: str,
    rows: Iterable[ConstraintRow],
    on_duplicate: Optional[DuplicateHook] = None,
) -> LPProblem:
    """
    Assemble an :class:`LPProblem` from the raw objective text and constraint rows.

    Rows whose expression is blank or whose right-hand side is not numeric are
    dropped, matching what an input form does with half-filled rows.
    """

    objective = parse_expression(objective_text, on_duplicate)
    constraints: List[Constraint] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, ConstraintInput):
            text, relation, rhs_text = row
            row = ConstraintInput(expression=text, relation=relation, rhs=rhs_text)
        rhs = parse_rhs(row.rhs)
        if not row.expression.strip() or rhs is None:
            logger.warning("Dropping constraint row %d (%r, rhs=%r).", idx + 1, row.expression, row.rhs)
            continue
        constraints.append(
            Constraint(
                expression=parse_expression(row.expression, on_duplicate),
                relation=normalize_relation(row.relation),
                rhs=rhs,
            )
        )

    logger.debug("Parsed objective %s with %d constraints.", objective, len(constraints))
    return LPProblem(objective=objective, constraints=constraints)


def parse_problem_text(spec: str) -> Tuple[str, List[ConstraintInput]]:
    """
    Small rule-based reader for specs like:
      "maximize 1.5x + 1.2y subject to 2x + 3y <= 24, 6x + 3y <= 48, x,y >= 0"
    Returns the objective text and the raw constraint rows. Non-negativity
    clauses (``x >= 0`` or ``x, y >= 0``) are dropped since every variable is
    already >= 0.
    """

    if not spec or not spec.strip():
        raise ValueError("Specification is empty.")

    normalized = " ".join(spec.replace("\n", " ").split())
    pieces = re.split(r"subject to|such that|s\.t\.", normalized, flags=re.IGNORECASE)
    objective_part = pieces[0].strip()
    constraints_part = pieces[1].strip() if len(pieces) > 1 else ""

    match = re.match(r"(maximize|minimize|max|min)\b\s*(?:z\s*=\s*)?(.*)", objective_part, flags=re.IGNORECASE)
    if not match:
        raise ValueError("Objective must start with 'maximize'.")
    if match.group(1).lower().startswith("min"):
        raise ValueError("Only maximization problems are supported.")
    objective_text = match.group(2).strip()
    if not objective_text:
        raise ValueError("Objective expression is missing.")

    rows: List[ConstraintInput] = []
    # bare letters preceding a bound, as in "x, y >= 0"
    pending: List[str] = []
    for token in (tok.strip() for tok in _TOKEN_SPLIT.split(constraints_part)):
        if not token:
            continue
        if _BARE_VARIABLE.match(token):
            pending.append(token)
            continue
        if _NON_NEGATIVITY.match(token):
            pending.clear()
            continue
        if pending:
            raise ValueError(f"Could not parse constraint segment '{pending[0]}'.")
        comp_match = _COMPARATOR.search(token)
        if not comp_match:
            raise ValueError(f"Could not parse constraint segment '{token}'.")
        lhs_str = token[: comp_match.start()].strip()
        rhs_str = token[comp_match.end() :].strip()
        if not lhs_str or not rhs_str:
            raise ValueError(f"Incomplete constraint expression '{token}'.")
        if parse_rhs(rhs_str) is None:
            raise ValueError(f"Right-hand side '{rhs_str}' is not numeric.")
        rows.append(ConstraintInput(expression=lhs_str, relation=normalize_relation(comp_match.group(1)), rhs=rhs_str))

    if pending:
        raise ValueError(f"Could not parse constraint segment '{pending[0]}'.")
    return objective_text, rows
