"""Expected-value oracle.

Computes, independently of any executor, the value each module's public
function must return:

    expected(n) = self_value(n) + sum(expected(d) for each edge n -> d)

A dependency reached through parallel edges is counted once per edge.
Every value must fit in a u64, the type of the entry function argument.
The computation is a full O(V + E) pass and runs after every structural
change; nothing is cached between passes.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from deporacle.constants import U64_MAX
from deporacle.diagnostics import ExpectedValueOverflowError, OracleContext

from .model import DependencyGraph

__all__ = ["calculate_expected_values", "expected_value_violations"]

logger = logging.getLogger(__name__)


def calculate_expected_values(
    graph: DependencyGraph, mutations: Sequence[str] = ()
) -> list[int]:
    """Recompute ``expected_value`` for every node in ``graph``.

    Nodes are settled in reverse topological order, so every dependency
    has its final value before any dependent reads it. Cached values are
    only replaced once every node has been settled.

    Args:
        graph: Graph to update in place
        mutations: Operations applied so far, reported on overflow

    Returns:
        Expected values indexed by handle.

    Raises:
        TopologicalSortError: If the graph contains a cycle.
        ExpectedValueOverflowError: If a value does not fit in a u64.
    """
    order = graph.topological_order()
    values = [0] * graph.node_count
    for handle in reversed(order):
        node = graph.node(handle)
        total = node.self_value
        for dep in graph.dependencies(handle):
            total += values[dep]
        if total > U64_MAX:
            context = OracleContext(
                component="oracle",
                operation="calculate",
                node=str(node.module_id),
                seed=graph.seed,
                mutations=tuple(mutations),
            )
            msg = f"Expected value {total} of {node.module_id} does not fit in u64"
            logger.error("%s (%s)", msg, context.describe())
            raise ExpectedValueOverflowError(msg, total, context)
        values[handle] = total

    for node, value in zip(graph.nodes, values, strict=True):
        node.expected_value = value
    logger.debug("Recomputed expected values for %d modules", graph.node_count)
    return values


def expected_value_violations(graph: DependencyGraph) -> list[int]:
    """Handles whose cached ``expected_value`` breaks the aggregation rule.

    Checks each node against its direct dependencies' cached values. An
    empty result means the cache is consistent with the current edges.
    """
    violations: list[int] = []
    for node in graph.nodes:
        total = node.self_value + sum(
            graph.node(dep).expected_value for dep in graph.dependencies(node.handle)
        )
        if total != node.expected_value:
            violations.append(node.handle)
    return violations
