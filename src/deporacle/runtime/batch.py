"""Transaction batch builder.

Turns a dependency graph into the ordered transactions an executor runs:

1. Publish phase: every module, dependencies first, signed by its owner.
2. Invoke phase: every module's entry function, dependents first, signed
   by the graph's sender and asserting the module's expected value.

Mutation-derived transactions are appended after both phases and the
whole list is submitted as one blocking batch. Any status other than
success fails the case; nothing is retried.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from deporacle.constants import ENTRY_FUNCTION_NAME
from deporacle.diagnostics import (
    ExecutionStatusMismatchError,
    ModuleBuildError,
    OracleContext,
    PackageBuildError,
    SourceGenerationError,
)
from deporacle.graph import DependencyGraph

from .protocols import Executor, ModuleSourceGenerator, PackageBuilder
from .transaction import (
    EntryFunctionPayload,
    PublishPackagePayload,
    SignedTransaction,
    encode_u64,
)

__all__ = ["TransactionBatchBuilder"]

logger = logging.getLogger(__name__)


class TransactionBatchBuilder:
    """Builds publish, upgrade and invoke transactions for one graph.

    Source generation and compilation are delegated to the collaborators
    passed in. Signing advances the signer's sequence number, so each
    build call is a state change, not a pure query.
    """

    __slots__ = ("_builder", "_generator", "_graph", "mutations")

    def __init__(
        self,
        graph: DependencyGraph,
        generator: ModuleSourceGenerator,
        builder: PackageBuilder,
    ) -> None:
        self._graph = graph
        self._generator = generator
        self._builder = builder
        # Rendered operations applied so far; reported with failures.
        self.mutations: list[str] = []

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    # =========================================================================
    # Single transactions
    # =========================================================================

    def build_package_for_node(self, handle: int) -> SignedTransaction:
        """Generate, build and sign the package for one module.

        The transaction is an upgrade if the module was published before.

        Raises:
            SourceGenerationError: If the source generator fails
            PackageBuildError: If the generated package does not build
        """
        node = self._graph.node(handle)
        deps = self._graph.dependency_ids(handle)
        context = self._context("publish", str(node.module_id))

        try:
            package_path = self._generator.generate(
                self._graph.base_directory, node.module_id, deps, node.self_value
            )
        except ModuleBuildError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            msg = f"Source generation failed for {node.module_id}: {exc}"
            raise SourceGenerationError(msg, context) from exc

        try:
            package = self._builder.build(package_path)
        except ModuleBuildError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            msg = f"Package build failed for {node.module_id}: {exc}"
            raise PackageBuildError(msg, context) from exc

        payload = PublishPackagePayload(
            metadata=package.metadata,
            code=package.code,
            upgrade=node.published,
        )
        txn = node.account.sign(payload)
        node.published = True
        logger.debug(
            "Built package for %s with %d dependencies", node.module_id, len(deps)
        )
        return txn

    def invoke_at(self, handle: int) -> SignedTransaction:
        """Call a module's entry function with its cached expected value."""
        node = self._graph.node(handle)
        payload = EntryFunctionPayload(
            module=node.module_id,
            function=ENTRY_FUNCTION_NAME,
            args=(encode_u64(node.expected_value),),
        )
        return self._graph.sender_account.sign(payload)

    # =========================================================================
    # Phases
    # =========================================================================

    def publish_phase(self, order: Sequence[int] | None = None) -> list[SignedTransaction]:
        """Publish every module, dependencies before dependents."""
        order = self._graph.topological_order() if order is None else order
        return [self.build_package_for_node(handle) for handle in reversed(order)]

    def invoke_phase(self, order: Sequence[int] | None = None) -> list[SignedTransaction]:
        """Invoke every module in topological order."""
        order = self._graph.topological_order() if order is None else order
        return [self.invoke_at(handle) for handle in order]

    def build_initial_batch(self) -> list[SignedTransaction]:
        """Publish phase followed by invoke phase, from one topological order."""
        order = self._graph.topological_order()
        txns = self.publish_phase(order)
        txns.extend(self.invoke_phase(order))
        logger.info(
            "Built initial batch: %d publish, %d invoke",
            self._graph.node_count,
            self._graph.node_count,
        )
        return txns

    # =========================================================================
    # Execution
    # =========================================================================

    def submit(
        self, executor: Executor, transactions: Sequence[SignedTransaction]
    ) -> None:
        """Execute ``transactions`` as one batch and require success for each.

        Raises:
            ExecutionStatusMismatchError: On the first non-success status, or
                if the executor returns the wrong number of statuses.
        """
        statuses = executor.execute_block(transactions)
        if len(statuses) != len(transactions):
            msg = (
                f"Executor returned {len(statuses)} statuses "
                f"for {len(transactions)} transactions"
            )
            logger.error(msg)
            raise ExecutionStatusMismatchError(msg, context=self._context("execute"))

        for position, (txn, status) in enumerate(zip(transactions, statuses, strict=True)):
            if status.is_success:
                continue
            node = self._module_for(txn)
            context = OracleContext(
                component="batch",
                operation="execute",
                node=node,
                seed=self._graph.seed,
                mutations=tuple(self.mutations),
                transaction_index=position,
            )
            msg = f"Transaction {txn.describe()} finished with {status}"
            logger.error("%s (%s)", msg, context.describe())
            raise ExecutionStatusMismatchError(
                msg, transaction=txn, status=status, context=context
            )
        logger.info("Executed batch of %d transactions", len(transactions))

    def _module_for(self, txn: SignedTransaction) -> str | None:
        if isinstance(txn.payload, EntryFunctionPayload):
            return str(txn.payload.module)
        for node in self._graph.nodes:
            if node.account.address == txn.sender:
                return str(node.module_id)
        return None

    def _context(self, operation: str, node: str | None = None) -> OracleContext:
        return OracleContext(
            component="batch",
            operation=operation,
            node=node,
            seed=self._graph.seed,
            mutations=tuple(self.mutations),
        )
