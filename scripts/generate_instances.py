#!/usr/bin/env python3
import argparse
import json
import random
import string
from pathlib import Path
from typing import Any, Dict, List, Optional

from tableau_solver.schemas import ConstraintInput


def generate_random_lp(num_vars: int, num_constraints: int, seed: Optional[int] = None) -> Dict[str, Any]:
    """Random bounded ``<=`` problem in the raw text form the solver reads."""
    if num_vars > 26:
        raise ValueError("Variables are single letters; at most 26 are available.")
    rng = random.Random(seed)
    names = string.ascii_lowercase[:num_vars]

    def expression(low: float, high: float) -> str:
        return " + ".join(f"{round(rng.uniform(low, high), 2)}{name}" for name in names)

    constraints: List[ConstraintInput] = []
    for _ in range(num_constraints):
        rhs = round(rng.uniform(num_vars * 2.0, num_vars * 6.0), 2)
        constraints.append(ConstraintInput(expression=expression(0.5, 5.0), relation="<=", rhs=str(rhs)))
    return {
        "objective": expression(1.0, 4.0),
        "constraints": [cons.model_dump() for cons in constraints],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random bounded LP instances.")
    parser.add_argument("--vars", type=int, default=3, help="Number of variables")
    parser.add_argument("--constraints", type=int, default=3, help="Number of constraints")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Optional output file")
    args = parser.parse_args()

    payload = [
        generate_random_lp(args.vars, args.constraints, (args.seed or 0) + idx)
        for idx in range(args.count)
    ]

    if args.out:
        Path(args.out).write_text(json.dumps(payload, indent=2))
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
