from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, List, Dict, Optional

Relation = Literal["<=", ">=", "="]
Status = Literal["optimal", "unbounded", "iteration_limit"]
PivotRule = Literal["dantzig", "bland"]

# variable symbol -> coefficient; a missing key means 0
LinearExpression = Dict[str, float]


class ConstraintInput(BaseModel):
    """One raw constraint row as typed by the user."""

    expression: str
    relation: str = "<="
    rhs: str | float


class Constraint(BaseModel):
    model_config = ConfigDict(frozen=True)

    expression: LinearExpression
    relation: Relation = "<="
    rhs: float


class LPProblem(BaseModel):
    model_config = ConfigDict(frozen=True)

    objective: LinearExpression
    constraints: List[Constraint] = Field(default_factory=list)


class SolveOptions(BaseModel):
    max_iters: int = 20
    tol: float = 1e-6
    pivot_rule: PivotRule = "dantzig"
    reject_duplicates: bool = False


class RatioTest(BaseModel):
    model_config = ConfigDict(frozen=True)

    rhs: float
    entry: float
    value: float
    text: str
    is_min: bool = False


class CellOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    old: float
    operand: float
    factor: Optional[float] = None
    result: float
    text: str


class RowOperations(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_name: str
    operations: List[CellOperation]


class PivotOperations(BaseModel):
    model_config = ConfigDict(frozen=True)

    pivot_row: List[CellOperation]
    other_rows: List[RowOperations]


class IterationSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    basic_vars: List[str]
    variables: List[str]
    matrix: List[List[float]]
    ratios: List[Optional[RatioTest]] = Field(default_factory=list)
    pivot_col: Optional[int] = None
    pivot_row: Optional[int] = None
    pivot_value: Optional[float] = None
    pivot_operations: Optional[PivotOperations] = None

    @property
    def is_final(self) -> bool:
        return self.pivot_col is None

    @property
    def entering(self) -> Optional[str]:
        return None if self.pivot_col is None else self.variables[self.pivot_col]

    @property
    def leaving(self) -> Optional[str]:
        return None if self.pivot_row is None else self.basic_vars[self.pivot_row]


class Solution(BaseModel):
    values: Dict[str, float]
    z: float


class SimplexResult(BaseModel):
    status: Status
    message: str = ""
    trace: List[IterationSnapshot] = Field(default_factory=list)
    solution: Optional[Solution] = None
    variable_list: List[str] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)
    objective: LinearExpression = Field(default_factory=dict)
    iterations: int = 0
    warnings: List[str] = Field(default_factory=list)

    def raise_for_status(self) -> "SimplexResult":
        """Return ``self`` when optimal, otherwise raise the matching :class:`SimplexError`."""
        from .lp.errors import IterationLimitError, UnboundedError

        if self.status == "unbounded":
            raise UnboundedError(self.message)
        if self.status == "iteration_limit":
            raise IterationLimitError(self.message)
        return self


class ConstraintCheck(BaseModel):
    index: int
    relation: Relation
    rhs: float
    substitution: str
    products: str
    total: float
    satisfied: bool


class ObjectiveCheck(BaseModel):
    substitution: str
    products: str
    total: float
    z: float
    satisfied: bool


class VerificationReport(BaseModel):
    solution_text: str
    constraints: List[ConstraintCheck]
    objective: ObjectiveCheck

    @property
    def all_satisfied(self) -> bool:
        return self.objective.satisfied and all(check.satisfied for check in self.constraints)
