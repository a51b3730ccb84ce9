"""Loader test harness.

``LoaderHarness`` is the entry point a test driver uses. It owns one
dependency graph and its batch builder for the lifetime of a test case:

    with LoaderHarness(graph, generator, builder) as harness:
        harness.setup(executor)
        harness.execute(executor, ops)

The initial expected values are computed on construction, so
``current_expected_value`` is meaningful before any batch is built.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import TracebackType

from .generation.ops import LoaderTransactionGen, generate_txn
from .graph import DependencyGraph, calculate_expected_values
from .runtime.batch import TransactionBatchBuilder
from .runtime.protocols import Executor, ModuleSourceGenerator, PackageBuilder
from .runtime.transaction import SignedTransaction

__all__ = ["LoaderHarness"]

logger = logging.getLogger(__name__)


class LoaderHarness:
    """Drives one dependency graph through publish, invoke and mutation batches.

    Not thread-safe: one harness belongs to one test case, and operations
    are applied strictly one at a time.
    """

    __slots__ = ("_batch", "_graph")

    def __init__(
        self,
        graph: DependencyGraph,
        generator: ModuleSourceGenerator,
        builder: PackageBuilder,
    ) -> None:
        self._graph = graph
        self._batch = TransactionBatchBuilder(graph, generator, builder)
        calculate_expected_values(graph)

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    @property
    def mutations(self) -> tuple[str, ...]:
        """Operations applied so far, in order."""
        return tuple(self._batch.mutations)

    def setup(self, executor: Executor) -> None:
        """Register every account with the executor. Call before any batch."""
        self._graph.setup(executor)

    def build_initial_batch(self) -> list[SignedTransaction]:
        """Publish every module, then invoke every module."""
        return self._batch.build_initial_batch()

    def apply_mutation(self, op: LoaderTransactionGen) -> SignedTransaction | None:
        """Apply one operation to the graph and return its transaction, if any."""
        return generate_txn(self._batch, op)

    def current_expected_value(self, handle: int) -> int:
        return self._graph.node(handle).expected_value

    def execute(
        self,
        executor: Executor,
        additional: Iterable[LoaderTransactionGen] = (),
    ) -> list[SignedTransaction]:
        """Build the initial batch plus one transaction per operation and run it.

        Every operation is applied before the batch is submitted, so the
        executor sees the whole sequence as a single block.

        Returns:
            The submitted transactions, in order.

        Raises:
            ExecutionStatusMismatchError: If any transaction did not succeed.
        """
        txns = self.build_initial_batch()
        for op in additional:
            txn = self.apply_mutation(op)
            if txn is not None:
                txns.append(txn)
        logger.info(
            "Submitting %d transactions for %d modules (%d operations)",
            len(txns),
            self._graph.node_count,
            len(self._batch.mutations),
        )
        self._batch.submit(executor, txns)
        return txns

    def close(self) -> None:
        self._graph.close()

    def __enter__(self) -> LoaderHarness:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
