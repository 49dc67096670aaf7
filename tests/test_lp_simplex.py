import json
from pathlib import Path

import pytest

from tableau_solver.lp.errors import IterationLimitError, SimplexError, UnboundedError
from tableau_solver.lp.parser import build_problem, parse_problem_text
from tableau_solver.lp.simplex import simplex_solve, solve_text
from tableau_solver.schemas import ConstraintInput, SolveOptions


def load_example(name: str):
    data = json.loads(Path(__file__).parent.parent.joinpath("examples", name).read_text())
    return data["objective"], [ConstraintInput.model_validate(row) for row in data["constraints"]]


def test_simplex_solves_default_example():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows, SolveOptions())

    assert result.status == "optimal"
    assert result.iterations == 2
    assert result.variable_list == ["x", "y"]
    assert result.solution is not None
    assert result.solution.values["x"] == pytest.approx(6.0, abs=1e-6)
    assert result.solution.values["y"] == pytest.approx(4.0, abs=1e-6)
    assert result.solution.z == pytest.approx(13.8, abs=1e-6)


def test_trace_records_each_pivot():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows)
    first, second, final = result.trace

    assert [snap.number for snap in result.trace] == [1, 2, 3]
    assert first.basic_vars == ["s1", "s2", "Z"]
    assert first.matrix[2] == [-1.5, -1.2, 0.0, 0.0, 0.0]
    assert (first.pivot_col, first.pivot_row, first.pivot_value) == (0, 1, 6.0)
    assert (first.entering, first.leaving) == ("x", "s2")
    assert first.ratios[0].text == "24 ÷ 2 = 12"
    assert not first.ratios[0].is_min
    assert first.ratios[1].text == "48 ÷ 6 = 8"
    assert first.ratios[1].is_min
    assert first.ratios[2] is None

    assert second.basic_vars == ["s1", "x", "Z"]
    assert (second.entering, second.leaving) == ("y", "s1")
    assert second.pivot_value == pytest.approx(2.0)

    assert final.is_final
    assert final.basic_vars == ["y", "x", "Z"]
    assert final.ratios == []
    assert final.pivot_operations is None


def test_pivot_operations_describe_every_cell():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows)
    ops = result.trace[0].pivot_operations

    assert [op.text for op in ops.pivot_row] == [
        "6(1/6) = 1",
        "3(1/6) = 1/2",
        "0(1/6) = 0",
        "1(1/6) = 1/6",
        "48(1/6) = 8",
    ]
    assert [row.row_name for row in ops.other_rows] == ["s1", "Z"]
    s1_ops = ops.other_rows[0].operations
    assert s1_ops[0].text == "2 - 1(2) = 0"
    assert s1_ops[4].text == "24 - 8(2) = 8"
    assert all(op.factor == 2.0 for op in s1_ops)
    z_ops = ops.other_rows[1].operations
    assert z_ops[1].text == "-6/5 - 1/2(-3/2) = -9/20"


def test_operation_results_match_next_snapshot():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows)

    for current, following in zip(result.trace, result.trace[1:]):
        ops = current.pivot_operations
        assert [op.result for op in ops.pivot_row] == following.matrix[current.pivot_row]
        others = [i for i in range(len(current.matrix)) if i != current.pivot_row]
        for i, row_ops in zip(others, ops.other_rows):
            assert [op.result for op in row_ops.operations] == following.matrix[i]


def test_snapshots_do_not_alias_the_working_tableau():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows)

    assert result.trace[0].matrix[0] == [2.0, 3.0, 1.0, 0.0, 24.0]
    assert result.trace[0].matrix != result.trace[-1].matrix


def test_unbounded_problem_is_reported():
    result = solve_text("x", [("-x", "<=", "1")])

    assert result.status == "unbounded"
    assert "unbounded" in result.message
    assert result.trace == []
    assert result.solution is None
    with pytest.raises(UnboundedError):
        result.raise_for_status()


def test_iteration_limit_is_distinct_from_unbounded():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows, SolveOptions(max_iters=1))

    assert result.status == "iteration_limit"
    assert result.message.startswith("Maximum iterations exceeded")
    assert result.trace == []
    with pytest.raises(IterationLimitError):
        result.raise_for_status()
    assert issubclass(IterationLimitError, SimplexError)


def test_zero_bound_constraint_ends_at_origin():
    result = solve_text("x", [("x", "<=", "0")])

    assert result.status == "optimal"
    assert result.solution.values == {"x": 0.0}
    assert result.solution.z == 0.0
    # the only pivot is degenerate: ratio 0 ÷ 1
    assert result.trace[0].ratios[0].value == 0.0


def test_already_optimal_tableau_needs_no_pivot():
    result = solve_text("-x", [("x", "<=", "5")])

    assert result.status == "optimal"
    assert result.iterations == 0
    assert len(result.trace) == 1
    assert result.trace[0].is_final
    assert result.solution.values == {"x": 0.0}


def test_ties_go_to_lowest_index():
    result = solve_text("x + y", [("x", "<=", "4"), ("x + y", "<=", "4")])
    first = result.trace[0]

    assert first.entering == "x"
    assert first.pivot_row == 0
    assert result.solution.z == pytest.approx(4.0)


def test_bland_rule_reaches_same_optimum():
    objective, rows = load_example("default_lp.json")
    result = solve_text(objective, rows, SolveOptions(pivot_rule="bland"))

    assert result.status == "optimal"
    assert result.solution.z == pytest.approx(13.8, abs=1e-6)


def test_unsupported_relations_are_flagged():
    result = solve_text("x + y", [("x + y", "<=", "4"), ("x", ">=", "1")])

    assert result.warnings
    assert "[2]" in result.warnings[0]


def test_strict_duplicate_option_rejects_repeated_terms():
    with pytest.raises(ValueError):
        solve_text("x + x", [("x", "<=", "1")], SolveOptions(reject_duplicates=True))


def test_raise_for_status_returns_optimal_result():
    problem = build_problem("3a + 2b", [("a + b", "<=", "4"), ("a + 3b", "<=", "6")])
    result = simplex_solve(problem).raise_for_status()

    assert result.solution.values == {"a": pytest.approx(4.0), "b": 0.0}
    assert result.solution.z == pytest.approx(12.0)


def test_problem_text_with_separate_bounds_solves_to_optimum():
    objective, rows = parse_problem_text("maximize 2x + y subject to x + y <= 4, x >= 0, y >= 0")
    result = solve_text(objective, rows)

    assert result.status == "optimal"
    assert result.warnings == []
    assert result.solution.values == {"x": pytest.approx(4.0), "y": 0.0}
    assert result.solution.z == pytest.approx(8.0)
