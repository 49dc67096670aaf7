from tableau_solver.schemas import ConstraintInput, SolveOptions
from tableau_solver.server import (
    build_arg_parser,
    explain_tableau,
    parse_linear_expression,
    solve_problem_text,
    solve_tableau,
    verify_solution,
)

ROWS = [
    ConstraintInput(expression="2x + 3y", relation="<=", rhs="24"),
    ConstraintInput(expression="6x + 3y", relation="<=", rhs="48"),
]


def test_solve_tableau_returns_trace():
    payload = solve_tableau("1.5x + 1.2y", ROWS)

    assert payload["status"] == "optimal"
    assert len(payload["trace"]) == 3
    assert payload["solution"]["values"] == {"x": 6.0, "y": 4.0}


def test_solve_tableau_reports_parse_errors():
    payload = solve_tableau("x", [ConstraintInput(expression="x", relation="<", rhs="1")])

    assert "error" in payload
    assert payload["result"] is None


def test_parse_linear_expression_tool():
    assert parse_linear_expression("-2a+b") == {"a": -2.0, "b": 1.0}


def test_solve_problem_text_tool():
    payload = solve_problem_text("maximize 1.5x + 1.2y subject to 2x + 3y <= 24, 6x + 3y <= 48")
    assert payload["status"] == "optimal"

    payload = solve_problem_text("maximize x subject to -x <= 1")
    assert payload["status"] == "unbounded"
    assert payload["trace"] == []


def test_verify_solution_tool():
    payload = verify_solution("1.5x + 1.2y", ROWS)

    assert payload["status"] == "optimal"
    assert payload["model"][0].startswith("Z = 3/2x + 6/5y")
    assert payload["cross_check"]["agrees"]
    assert all(check["satisfied"] for check in payload["verification"]["constraints"])


def test_explain_tableau_tool():
    text = explain_tableau("1.5x + 1.2y", ROWS)
    assert text.count("Tableau ") == 3

    assert explain_tableau("x", [ConstraintInput(expression="-x", rhs="1")]).startswith("Error: Problem is unbounded")


def test_verify_solution_tool_passes_tolerance():
    rows = [ConstraintInput(expression="x", relation=">=", rhs="2")]

    strict = verify_solution("-x", rows)
    loose = verify_solution("-x", rows, SolveOptions(tol=2.5))

    assert not strict["verification"]["constraints"][0]["satisfied"]
    assert loose["verification"]["constraints"][0]["satisfied"]


def test_arg_parser_reads_environment(monkeypatch):
    monkeypatch.setenv("MCP_TRANSPORT", "streamable-http")
    monkeypatch.setenv("PORT", "9000")
    args = build_arg_parser().parse_args([])

    assert args.transport == "http"
    assert args.port == 9000
    assert build_arg_parser().parse_args(["--transport", "stdio"]).transport == "stdio"
