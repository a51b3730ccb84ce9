"""Loader operations and their translation into transactions.

Two operations are generated against a live graph:

- ``Invoke(index)``: call one module's entry function with its cached
  expected value.
- ``UpdateEdge(lhs, rhs)``: toggle the dependency edge between two
  modules, recompute every expected value, and upgrade only the dependent
  module. Modules that call the dependent are not republished; they must
  keep resolving through the upgraded code.

Indices are raw and resolved against the node count when applied.

Python 3.13+.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from deporacle.core import Index
from deporacle.graph import calculate_expected_values
from deporacle.runtime.batch import TransactionBatchBuilder
from deporacle.runtime.transaction import SignedTransaction

__all__ = [
    "Invoke",
    "LoaderTransactionGen",
    "UpdateEdge",
    "generate_txn",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Invoke:
    """Invoke the entry function of the module ``index`` resolves to."""

    index: Index

    def __str__(self) -> str:
        return f"Invoke({self.index.raw})"


@dataclass(frozen=True, slots=True)
class UpdateEdge:
    """Add or remove the edge between the modules ``lhs`` and ``rhs`` resolve to."""

    lhs: Index
    rhs: Index

    def __str__(self) -> str:
        return f"UpdateEdge({self.lhs.raw}, {self.rhs.raw})"


type LoaderTransactionGen = Invoke | UpdateEdge


def generate_txn(
    builder: TransactionBatchBuilder, op: LoaderTransactionGen
) -> SignedTransaction | None:
    """Apply ``op`` to the builder's graph and return its transaction.

    Returns:
        The invoke or upgrade transaction, or None when an ``UpdateEdge``
        resolves both indices to the same module.
    """
    graph = builder.graph
    builder.mutations.append(str(op))

    match op:
        case Invoke(index=index):
            return builder.invoke_at(index.index(graph.node_count))

        case UpdateEdge(lhs=lhs, rhs=rhs):
            mutation = graph.mutate(lhs.index(graph.node_count), rhs.index(graph.node_count))
            if mutation is None:
                return None
            logger.info(
                "%s edge %d -> %d",
                "Added" if mutation.added else "Removed",
                mutation.dependent,
                mutation.dependency,
            )
            calculate_expected_values(graph, builder.mutations)
            return builder.build_package_for_node(mutation.dependent)

        case _:  # pragma: no cover
            msg = f"Unknown loader operation: {op!r}"
            raise TypeError(msg)
