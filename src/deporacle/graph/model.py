"""Dependency graph of modules.

Nodes live in an arena and are addressed by their creation index (the
handle). Each node keeps an ordered list of the handles it depends on.
An edge always points from a higher handle to a lower one, so the graph
is acyclic by construction:

    handle 2 (M1) --> handle 1 (M2) --> handle 0 (M3)

Edge attempts are not deduplicated. Two attempts naming the same pair
produce two parallel edges, and the dependent module then calls that
dependency twice.

Python 3.13+.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import weakref
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from deporacle.analysis import topological_sort
from deporacle.constants import DEFAULT_BALANCE, U64_MAX
from deporacle.core import Index, is_valid_address, is_valid_identifier
from deporacle.diagnostics import ConstructionError, OracleContext, TopologicalSortError
from deporacle.runtime.account import AccountData
from deporacle.runtime.transaction import ModuleId

if TYPE_CHECKING:
    from deporacle.runtime.protocols import Executor

__all__ = [
    "DependencyGraph",
    "EdgeMutation",
    "ModuleNode",
    "NodeSpec",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NodeSpec:
    """Input describing one module to create.

    Attributes:
        account: Account that owns and publishes the module
        self_value: The module's own contribution to its expected value
        name: Module name, unique within the graph
    """

    account: AccountData
    self_value: int
    name: str


@dataclass(slots=True)
class ModuleNode:
    """A module in the dependency graph.

    Mutability Note:
        ``expected_value`` is recomputed by the oracle after every structural
        change and ``published`` flips once the module's package is first
        published. ``handle``, ``module_id`` and ``self_value`` never change.

    Attributes:
        handle: Creation index, also the node's position in the arena
        module_id: Owning address plus module name
        self_value: Value the module contributes on its own
        account: Owning account (signs publish and upgrade transactions)
        expected_value: Oracle result for the module's public function
        published: Whether a package has been emitted for this module
    """

    handle: int
    module_id: ModuleId
    self_value: int
    account: AccountData = field(repr=False)
    expected_value: int = 0
    published: bool = False


@dataclass(frozen=True, slots=True)
class EdgeMutation:
    """Structural change applied by ``DependencyGraph.mutate``.

    Attributes:
        dependent: Handle of the edge's source, whose package must be rebuilt
        dependency: Handle of the edge's target
        added: True if an edge was inserted, False if one was removed
    """

    dependent: int
    dependency: int
    added: bool


class DependencyGraph:
    """Arena-backed DAG of modules with a dedicated invocation sender.

    One instance belongs to exactly one test case. It is mutated in place
    and is not safe for concurrent use.

    The graph owns a working directory handed to the module source
    generator. Use the graph as a context manager, or call ``close()``, to
    remove it.
    """

    __slots__ = (
        "__weakref__",
        "_adjacency",
        "_base_directory",
        "_cleanup",
        "_nodes",
        "sender_account",
        "seed",
    )

    def __init__(
        self,
        *,
        sender_account: AccountData | None = None,
        base_directory: Path | None = None,
        seed: int | None = None,
    ) -> None:
        """Create an empty graph. Most callers want ``DependencyGraph.create``.

        Args:
            sender_account: Account signing invoke transactions
                (default: fresh account holding DEFAULT_BALANCE)
            base_directory: Working directory for generated sources
                (default: a new temporary directory owned by the graph)
            seed: Seed of the generating configuration, reported in errors
        """
        self._nodes: list[ModuleNode] = []
        self._adjacency: list[list[int]] = []
        self.sender_account = sender_account or AccountData.new(DEFAULT_BALANCE, 0)
        self.seed = seed
        if base_directory is None:
            self._base_directory = Path(tempfile.mkdtemp(prefix="deporacle-"))
            # Removed when the graph is garbage collected if close() is never called.
            self._cleanup: weakref.finalize | None = weakref.finalize(
                self, shutil.rmtree, self._base_directory, ignore_errors=True
            )
        else:
            base_directory.mkdir(parents=True, exist_ok=True)
            self._base_directory = base_directory
            self._cleanup = None

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def create(
        cls,
        node_specs: Sequence[NodeSpec],
        edge_attempts: Iterable[tuple[Index, Index]],
        *,
        sender_account: AccountData | None = None,
        base_directory: Path | None = None,
        seed: int | None = None,
    ) -> DependencyGraph:
        """Build a graph from node specs and raw edge attempts.

        Nodes receive handles in input order. Each edge attempt resolves both
        indices against the node count and inserts an edge from the higher
        handle to the lower one. Attempts resolving to a single node are
        skipped; repeated attempts produce parallel edges.

        Raises:
            ConstructionError: If there are no nodes, a name is invalid or
                duplicated, a self value is out of range, or two accounts
                share an address.
        """
        graph = cls(sender_account=sender_account, base_directory=base_directory, seed=seed)
        try:
            graph._populate(node_specs, edge_attempts)
        except ConstructionError:
            graph.close()
            raise
        logger.info(
            "Constructed dependency graph: %d modules, %d edges",
            graph.node_count,
            graph.edge_count,
        )
        return graph

    def _populate(
        self,
        node_specs: Sequence[NodeSpec],
        edge_attempts: Iterable[tuple[Index, Index]],
    ) -> None:
        if not node_specs:
            raise ConstructionError(
                "Dependency graph needs at least one module", self._context("construct")
            )

        names: set[str] = set()
        addresses: set[str] = {self.sender_account.address}
        for spec in node_specs:
            context = self._context("construct", node=spec.name)
            if not is_valid_identifier(spec.name):
                raise ConstructionError(f"Invalid module name {spec.name!r}", context)
            if not is_valid_address(spec.account.address):
                raise ConstructionError(
                    f"Invalid account address {spec.account.address!r}", context
                )
            if spec.name in names:
                raise ConstructionError(f"Duplicate module name {spec.name!r}", context)
            if spec.account.address in addresses:
                raise ConstructionError(
                    f"Account {spec.account.address} is already in use", context
                )
            if not 0 <= spec.self_value <= U64_MAX:
                raise ConstructionError(
                    f"Self value {spec.self_value} does not fit in u64", context
                )
            names.add(spec.name)
            addresses.add(spec.account.address)
            self._add_node(spec)

        for lhs, rhs in edge_attempts:
            src = lhs.index(self.node_count)
            dst = rhs.index(self.node_count)
            if src == dst:
                continue
            if src < dst:
                src, dst = dst, src
            self._add_edge(src, dst)

    def _add_node(self, spec: NodeSpec) -> ModuleNode:
        node = ModuleNode(
            handle=len(self._nodes),
            module_id=ModuleId(spec.account.address, spec.name),
            self_value=spec.self_value,
            account=spec.account,
        )
        self._nodes.append(node)
        self._adjacency.append([])
        logger.debug("Added module %s (self value %d)", node.module_id, node.self_value)
        return node

    def _add_edge(self, src: int, dst: int) -> None:
        if src <= dst:
            msg = f"Edge {src} -> {dst} must point from a later module to an earlier one"
            raise ValueError(msg)
        self._adjacency[src].append(dst)
        logger.debug("Added edge %d -> %d", src, dst)

    # =========================================================================
    # Mutation
    # =========================================================================

    def mutate(self, lhs: int, rhs: int) -> EdgeMutation | None:
        """Toggle one dependency edge between two resolved handles.

        The pair is ordered so the higher handle is the dependent. If an edge
        already joins them, one instance is removed; otherwise one is added.

        Returns:
            The applied change, or None when both handles name the same node.
        """
        if lhs == rhs:
            logger.warning("Ignoring edge update from module %d to itself", lhs)
            return None
        if lhs < rhs:
            lhs, rhs = rhs, lhs

        deps = self._adjacency[lhs]
        if rhs in deps:
            deps.remove(rhs)
            logger.debug("Removed edge %d -> %d", lhs, rhs)
            return EdgeMutation(dependent=lhs, dependency=rhs, added=False)
        self._add_edge(lhs, rhs)
        return EdgeMutation(dependent=lhs, dependency=rhs, added=True)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(deps) for deps in self._adjacency)

    @property
    def nodes(self) -> tuple[ModuleNode, ...]:
        return tuple(self._nodes)

    @property
    def base_directory(self) -> Path:
        return self._base_directory

    def node(self, handle: int) -> ModuleNode:
        return self._nodes[handle]

    def dependencies(self, handle: int) -> tuple[int, ...]:
        """Handles ``handle`` depends on, one entry per edge instance."""
        return tuple(self._adjacency[handle])

    def dependency_ids(self, handle: int) -> list[ModuleId]:
        return [self._nodes[dep].module_id for dep in self._adjacency[handle]]

    def edges(self) -> list[tuple[int, int]]:
        """All edges as sorted ``(dependent, dependency)`` pairs, with repeats."""
        return sorted(
            (src, dst) for src, deps in enumerate(self._adjacency) for dst in deps
        )

    def adjacency(self) -> list[list[int]]:
        """Copy of the adjacency lists."""
        return [list(deps) for deps in self._adjacency]

    def topological_order(self) -> list[int]:
        """Handles ordered so every dependent precedes its dependencies.

        Raises:
            TopologicalSortError: If the acyclicity invariant was violated.
        """
        try:
            return topological_sort(self._adjacency)
        except TopologicalSortError as e:
            raise TopologicalSortError(
                "Dependency graph should be acyclic", e.cycles, self._context("toposort")
            ) from e

    # =========================================================================
    # Executor setup and lifecycle
    # =========================================================================

    def setup(self, executor: Executor) -> None:
        """Register every module owner and the sender with the executor."""
        for node in self._nodes:
            executor.add_account_data(node.account)
        executor.add_account_data(self.sender_account)
        logger.debug("Registered %d accounts with executor", self.node_count + 1)

    def close(self) -> None:
        """Remove the working directory if the graph created it."""
        if self._cleanup is not None:
            self._cleanup()

    def __enter__(self) -> DependencyGraph:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _context(self, operation: str, node: str | None = None) -> OracleContext:
        return OracleContext(component="graph", operation=operation, node=node, seed=self.seed)

    def __repr__(self) -> str:
        return (
            f"DependencyGraph(nodes={self.node_count}, edges={self.edge_count}, "
            f"seed={self.seed})"
        )
