"""Hypothesis strategies for dependency graphs and loader operations.

Strategies draw raw inputs (node specs, index pairs, operations) and
build the graph from them, so failures shrink towards fewer modules,
fewer edges and ``Invoke`` operations.

Event-Emitting Strategies (HypoFuzz-Optimized):
    - dependency_graphs: Emits ``strategy=graph_{shape}``
    - loader_transaction_gens: Emits ``strategy=op_{variant}``

Python 3.13+.
"""

from __future__ import annotations

from pathlib import Path

from hypothesis import event
from hypothesis import strategies as st
from hypothesis.strategies import composite

from deporacle.constants import (
    DEFAULT_BALANCE,
    INVOKE_WEIGHT,
    MAX_SELF_VALUE,
    MODULE_NAME_PATTERN,
    UPDATE_EDGE_WEIGHT,
)
from deporacle.core import Index
from deporacle.graph import DependencyGraph, NodeSpec
from deporacle.runtime.account import AccountData

from .ops import Invoke, LoaderTransactionGen, UpdateEdge

__all__ = [
    "accounts",
    "dependency_graphs",
    "edge_attempts",
    "graph_inputs",
    "indices",
    "loader_transaction_gens",
    "module_names",
    "node_specs",
]

indices: st.SearchStrategy[Index] = st.builds(
    Index, st.integers(min_value=0, max_value=2**64 - 1)
)

module_names: st.SearchStrategy[str] = st.from_regex(MODULE_NAME_PATTERN, fullmatch=True)

_keys: st.SearchStrategy[bytes] = st.binary(min_size=32, max_size=32)

edge_attempts: st.SearchStrategy[tuple[Index, Index]] = st.tuples(indices, indices)


def accounts(
    min_balance: int = DEFAULT_BALANCE,
    max_balance: int = DEFAULT_BALANCE * 2,
) -> st.SearchStrategy[AccountData]:
    """Accounts with a balance in ``[min_balance, max_balance)`` and sequence 0."""
    return st.builds(
        AccountData,
        key=_keys,
        balance=st.integers(min_value=min_balance, max_value=max_balance - 1),
    )


def node_specs() -> st.SearchStrategy[NodeSpec]:
    """Module owner, u16 self value and ``[a-z]{10}`` name."""
    return st.builds(
        NodeSpec,
        account=accounts(),
        self_value=st.integers(min_value=0, max_value=MAX_SELF_VALUE),
        name=module_names,
    )


@composite
def graph_inputs(
    draw: st.DrawFn,
    num_nodes: tuple[int, int] = (1, 10),
    num_edge_attempts: tuple[int, int] = (0, 20),
) -> tuple[list[NodeSpec], list[tuple[Index, Index]], AccountData]:
    """Draw node specs, edge attempts and a sender for ``DependencyGraph.create``.

    Args:
        draw: Hypothesis draw function.
        num_nodes: Half-open range for the module count.
        num_edge_attempts: Half-open range for the number of edge attempts.
    """
    specs = draw(
        st.lists(
            node_specs(),
            min_size=num_nodes[0],
            max_size=num_nodes[1] - 1,
            unique_by=(lambda spec: spec.name, lambda spec: spec.account.address),
        )
    )
    edges = draw(
        st.lists(
            edge_attempts,
            min_size=num_edge_attempts[0],
            max_size=num_edge_attempts[1] - 1,
        )
    )
    used = {spec.account.address for spec in specs}
    sender = draw(
        st.builds(AccountData, key=_keys, balance=st.just(DEFAULT_BALANCE)).filter(
            lambda account: account.address not in used
        )
    )
    return specs, edges, sender


@composite
def dependency_graphs(
    draw: st.DrawFn,
    num_nodes: tuple[int, int] = (1, 10),
    num_edge_attempts: tuple[int, int] = (0, 20),
    base_directory: Path | None = None,
) -> DependencyGraph:
    """Generate dependency graphs from raw node specs and edge attempts.

    The real edge count may be lower than the number of attempts: an
    attempt whose indices resolve to one module is skipped.

    Args:
        draw: Hypothesis draw function.
        num_nodes: Half-open range for the module count.
        num_edge_attempts: Half-open range for the number of edge attempts.
        base_directory: Working directory for generated sources
            (default: a temporary directory owned by the graph).

    Events emitted:
        - ``strategy=graph_{shape}``: isolated, sparse or dense.
    """
    specs, edges, sender = draw(graph_inputs(num_nodes, num_edge_attempts))
    graph = DependencyGraph.create(
        specs, edges, sender_account=sender, base_directory=base_directory
    )

    if graph.edge_count == 0:
        event("strategy=graph_isolated")
    elif graph.edge_count < graph.node_count:
        event("strategy=graph_sparse")
    else:
        event("strategy=graph_dense")
    return graph


@composite
def loader_transaction_gens(draw: st.DrawFn) -> LoaderTransactionGen:
    """Generate loader operations weighted 9:1 towards ``Invoke``.

    Events emitted:
        - ``strategy=op_{variant}``: invoke or update_edge.
    """
    roll = draw(st.integers(min_value=0, max_value=INVOKE_WEIGHT + UPDATE_EDGE_WEIGHT - 1))
    if roll < INVOKE_WEIGHT:
        event("strategy=op_invoke")
        return Invoke(draw(indices))
    event("strategy=op_update_edge")
    return UpdateEdge(draw(indices), draw(indices))
