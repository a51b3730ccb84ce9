"""Inspect a generated test case by seed.

Rebuilds the dependency graph a ``GraphConfig`` produces, prints each
module with its dependencies and expected value, then replays the
generated operations against the graph structure. Use it to look at the
case behind a failing seed.

Usage:
    deporacle describe --seed 42
    deporacle describe --seed 42 --nodes 3:8 --edges 0:12 --ops 20 --json

Exit Codes:
    0   Case described
    2   Invalid arguments

Python 3.13+.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .generation import GraphConfig, Invoke, UpdateEdge, generate_case
from .graph import DependencyGraph, calculate_expected_values

__all__ = ["main"]


def _parse_range(text: str) -> tuple[int, int]:
    low, sep, high = text.partition(":")
    if not sep:
        msg = f"expected MIN:MAX, got {text!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return int(low), int(high)
    except ValueError as e:
        msg = f"expected integers in {text!r}"
        raise argparse.ArgumentTypeError(msg) from e


def _snapshot(graph: DependencyGraph) -> list[dict[str, Any]]:
    return [
        {
            "handle": node.handle,
            "module": str(node.module_id),
            "self_value": node.self_value,
            "expected_value": node.expected_value,
            "dependencies": list(graph.dependencies(node.handle)),
        }
        for node in graph.nodes
    ]


def describe(config: GraphConfig, num_ops: int) -> dict[str, Any]:
    """Build the case for ``config`` and replay its operations structurally."""
    case = generate_case(config, num_ops)
    with case.build_graph() as graph:
        calculate_expected_values(graph)
        initial = _snapshot(graph)
        steps: list[dict[str, Any]] = []
        for op in case.ops:
            step: dict[str, Any] = {"op": str(op)}
            match op:
                case Invoke(index=index):
                    handle = index.index(graph.node_count)
                    step["module"] = handle
                    step["expected_value"] = graph.node(handle).expected_value
                case UpdateEdge(lhs=lhs, rhs=rhs):
                    mutation = graph.mutate(
                        lhs.index(graph.node_count), rhs.index(graph.node_count)
                    )
                    if mutation is None:
                        step["change"] = None
                    else:
                        calculate_expected_values(graph)
                        step["change"] = {
                            "dependent": mutation.dependent,
                            "dependency": mutation.dependency,
                            "added": mutation.added,
                        }
                        step["expected_values"] = [n.expected_value for n in graph.nodes]
            steps.append(step)
    return {
        "seed": config.seed,
        "num_nodes": list(config.num_nodes),
        "num_edge_attempts": list(config.num_edge_attempts),
        "modules": initial,
        "ops": steps,
    }


def _print_text(report: dict[str, Any]) -> None:
    print(f"seed {report['seed']}: {len(report['modules'])} modules")
    for module in report["modules"]:
        deps = ", ".join(str(d) for d in module["dependencies"]) or "-"
        print(
            f"  [{module['handle']}] {module['module']} "
            f"self={module['self_value']} expected={module['expected_value']} deps={deps}"
        )
    for step in report["ops"]:
        if "module" in step:
            print(f"  {step['op']}: module {step['module']} expects {step['expected_value']}")
        elif step["change"] is None:
            print(f"  {step['op']}: no-op")
        else:
            change = step["change"]
            verb = "add" if change["added"] else "remove"
            print(
                f"  {step['op']}: {verb} {change['dependent']} -> {change['dependency']}, "
                f"expected={step['expected_values']}"
            )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="deporacle",
        description="Inspect generated dependency-graph test cases.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    describe_cmd = commands.add_parser("describe", help="Print the case generated for a seed")
    describe_cmd.add_argument("--seed", type=int, default=0, help="Case seed (default: 0)")
    describe_cmd.add_argument(
        "--nodes", type=_parse_range, default=(1, 10), help="Module count MIN:MAX (half-open)"
    )
    describe_cmd.add_argument(
        "--edges", type=_parse_range, default=(0, 20), help="Edge attempts MIN:MAX (half-open)"
    )
    describe_cmd.add_argument("--ops", type=int, default=0, help="Operations to generate")
    describe_cmd.add_argument("--json", action="store_true", help="Emit JSON")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = GraphConfig(num_nodes=args.nodes, num_edge_attempts=args.edges, seed=args.seed)
    except ValueError as e:
        parser.error(str(e))
    if args.ops < 0:
        parser.error("--ops must be non-negative")

    report = describe(config, args.ops)
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        _print_text(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
