import argparse
import logging
import os
from typing import Dict, List, Optional, Sequence

from mcp.server.fastmcp import FastMCP

from .schemas import ConstraintInput, SolveOptions
from .lp.formatting import render_lp_model, render_snapshot
from .lp.parser import build_problem, parse_expression, parse_problem_text
from .lp.simplex import simplex_solve, solve_text
from .lp import verification

app = FastMCP("Tableau Solver")


@app.tool()
def solve_tableau(
    objective: str,
    constraints: List[ConstraintInput],
    options: SolveOptions | None = None,
) -> dict:
    """Maximize the objective with the tableau method and return the full pivot trace."""
    try:
        result = solve_text(objective, constraints, options or SolveOptions())
    except ValueError as e:
        return {"error": f"Failed to parse problem: {e}", "result": None}
    return result.model_dump()


@app.tool()
def parse_linear_expression(expression: str) -> Dict[str, float]:
    "Parse text like '1.5x + 1.2y' into a {variable: coefficient} mapping."
    return parse_expression(expression)


@app.tool()
def solve_problem_text(spec: str, options: SolveOptions | None = None) -> dict:
    """
    Solve a problem written as text, e.g.
    'maximize 1.5x + 1.2y subject to 2x + 3y <= 24, 6x + 3y <= 48'.
    """
    try:
        objective, rows = parse_problem_text(spec)
        result = solve_text(objective, rows, options or SolveOptions())
    except ValueError as e:
        return {"error": f"Failed to parse problem: {e}", "result": None}
    return result.model_dump()


@app.tool()
def verify_solution(
    objective: str,
    constraints: List[ConstraintInput],
    options: SolveOptions | None = None,
) -> dict:
    """
    Solve, then substitute the optimum back into each constraint and the objective.

    Returns the canonical LP model lines, the substitution checks and a comparison
    against SciPy's HiGHS solver. Failed solves return their status and message only.
    """
    try:
        problem = build_problem(objective, constraints)
    except ValueError as e:
        return {"error": f"Failed to parse problem: {e}"}

    opts = options or SolveOptions()
    result = simplex_solve(problem, opts)
    if result.status != "optimal":
        return {"status": result.status, "message": result.message}

    report = verification.verify_solution(result, opts)
    return {
        "status": result.status,
        "model": render_lp_model(result.objective, result.constraints, result.variable_list),
        "verification": report.model_dump(),
        "cross_check": verification.cross_check(problem, result),
    }


@app.tool()
def explain_tableau(objective: str, constraints: List[ConstraintInput]) -> str:
    "Plain-text walk through every tableau of the solve."
    try:
        result = solve_text(objective, constraints)
    except ValueError as e:
        return f"Error: {e}"
    if result.status != "optimal":
        return f"Error: {result.message}"
    return "\n\n".join(render_snapshot(snapshot) for snapshot in result.trace)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the tableau solver tools over MCP.")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio" if os.environ.get("MCP_TRANSPORT", "stdio") == "stdio" else "http",
        help="stdio for desktop clients, http for streamable HTTP (env MCP_TRANSPORT)",
    )
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"), help="HTTP bind address (env HOST)")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8081")), help="HTTP port (env PORT)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "WARNING"),
        help="Logging level for the solver modules (env LOG_LEVEL)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    if args.transport == "stdio":
        app.run(transport="stdio")
        return
    app.settings.host = args.host
    app.settings.port = args.port
    app.settings.streamable_http_path = "/mcp"
    app.run(transport="streamable-http")


if __name__ == "__main__":
    main()
