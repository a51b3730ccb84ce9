"""Oracle exception hierarchy.

None of these errors are recovered locally. They propagate to the test
driver as case failures and carry an ``OracleContext`` with enough detail
(node identity, mutation sequence, seed) to replay the case.

Hierarchy:
    OracleError (base)
    ├─ ConstructionError (invalid or duplicate module identity)
    ├─ ModuleBuildError
    │  ├─ SourceGenerationError (source generator rejected the node)
    │  └─ PackageBuildError (generated source failed to build)
    ├─ TopologicalSortError (cycle in the dependency graph)
    ├─ ExpectedValueOverflowError (expected value exceeds u64)
    └─ ExecutionStatusMismatchError (executor reported non-success)

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .codes import ErrorCategory, OracleContext

if TYPE_CHECKING:
    from deporacle.runtime.transaction import SignedTransaction, TransactionStatus

__all__ = [
    "ConstructionError",
    "EmptyCollectionError",
    "ExecutionStatusMismatchError",
    "ExpectedValueOverflowError",
    "ModuleBuildError",
    "OracleError",
    "PackageBuildError",
    "SourceGenerationError",
    "TopologicalSortError",
]


class OracleError(Exception):
    """Base exception for all oracle failures.

    Subclasses set ``category``; a bare OracleError has none.

    Attributes:
        context: Structured diagnostic context (optional)
    """

    category: ErrorCategory | None = None

    def __init__(self, message: str, context: OracleContext | None = None) -> None:
        """Initialize OracleError.

        Args:
            message: Human-readable error description
            context: Structured diagnostic context (optional)
        """
        if context is not None:
            message = f"{message} ({context.describe()})"
        super().__init__(message)
        self.context = context

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return f"{self.__class__.__name__}({self.args[0]!r}, context={self.context!r})"


class ConstructionError(OracleError):
    """Malformed node identity, e.g. a duplicate or invalid module name."""

    category = ErrorCategory.CONSTRUCTION


class ModuleBuildError(OracleError):
    """Module source generation or package build failed.

    Indicates a bug in a collaborator or a graph shape it cannot handle.
    """

    category = ErrorCategory.BUILD


class SourceGenerationError(ModuleBuildError):
    """The module source generator failed for a node."""


class PackageBuildError(ModuleBuildError):
    """The package builder rejected generated source."""


class TopologicalSortError(OracleError):
    """The dependency graph contains a cycle.

    Edges are only ever directed from a later-created node to an
    earlier-created one, so this is an internal consistency fault.

    Attributes:
        cycles: Cycles found, each a closed list of node handles
    """

    category = ErrorCategory.TOPOLOGY

    def __init__(
        self,
        message: str,
        cycles: list[list[int]],
        context: OracleContext | None = None,
    ) -> None:
        super().__init__(message, context)
        self.cycles = cycles


class ExecutionStatusMismatchError(OracleError):
    """A transaction in a batch did not execute successfully.

    This is the primary test-failure signal. It is never retried.

    Attributes:
        transaction: The offending transaction (None on a count mismatch)
        status: Status reported by the executor (None on a count mismatch)
    """

    category = ErrorCategory.EXECUTION

    def __init__(
        self,
        message: str,
        *,
        transaction: SignedTransaction | None = None,
        status: TransactionStatus | None = None,
        context: OracleContext | None = None,
    ) -> None:
        super().__init__(message, context)
        self.transaction = transaction
        self.status = status


class EmptyCollectionError(ValueError):
    """An index was resolved against an empty collection."""


class ExpectedValueOverflowError(OracleError):
    """A module's expected value does not fit in a u64.

    The entry function argument is a u64, so such a case cannot be
    expressed as a transaction. Self values near ``U64_MAX``, or many
    paths between two modules, both lead here.

    Attributes:
        value: The unrepresentable expected value
    """

    category = ErrorCategory.ORACLE

    def __init__(self, message: str, value: int, context: OracleContext | None = None) -> None:
        super().__init__(message, context)
        self.value = value
