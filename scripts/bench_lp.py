#!/usr/bin/env python3
import json
import time
from pathlib import Path
from typing import Any, Dict

from tableau_solver.lp.simplex import solve_text
from tableau_solver.schemas import ConstraintInput, SolveOptions
from scripts.generate_instances import generate_random_lp


def load_example(name: str) -> Dict[str, Any]:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return json.loads(path.read_text())


def main() -> None:
    opts = SolveOptions()
    cases = [("examples/default_lp.json", load_example("default_lp.json"))]
    for seed in range(3):
        cases.append((f"random-{seed}", generate_random_lp(3, 3, seed)))

    print("name,status,objective,iterations,time_ms")
    for name, data in cases:
        rows = [ConstraintInput.model_validate(row) for row in data["constraints"]]
        start = time.perf_counter()
        result = solve_text(data["objective"], rows, opts)
        elapsed_ms = (time.perf_counter() - start) * 1000
        z = result.solution.z if result.solution else None
        print(f"{name},{result.status},{z},{result.iterations},{elapsed_ms:.2f}")


if __name__ == "__main__":
    main()
