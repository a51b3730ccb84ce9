"""Error categories and diagnostic context.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from enum import StrEnum

__all__ = [
    "ErrorCategory",
    "OracleContext",
]


class ErrorCategory(StrEnum):
    """Error categorization for OracleError.

    Inherits from ``StrEnum`` so log aggregation receives plain strings
    (``"construction"``, ``"build"``, etc.) rather than enum reprs.

    Categories:
        CONSTRUCTION: Malformed node identity or graph input
        BUILD: Module source generation or package build failure
        TOPOLOGY: Dependency graph is not acyclic
        ORACLE: An expected value cannot be represented as a u64
        EXECUTION: Executor reported a non-success status
    """

    CONSTRUCTION = "construction"
    BUILD = "build"
    TOPOLOGY = "topology"
    ORACLE = "oracle"
    EXECUTION = "execution"


@dataclass(frozen=True, slots=True)
class OracleContext:
    """Context needed to reproduce a failing test case.

    Attributes:
        component: Component where the error occurred (graph, oracle, batch)
        operation: Operation being performed (construct, mutate, publish, execute)
        node: Module identity involved, rendered as ``0x...::name`` (optional)
        seed: Seed of the generating configuration (optional)
        mutations: Operations applied to the graph before the failure
        transaction_index: Position of the offending transaction in its batch
    """

    component: str
    operation: str
    node: str | None = None
    seed: int | None = None
    mutations: tuple[str, ...] = ()
    transaction_index: int | None = None

    def describe(self) -> str:
        """Render the context as a single diagnostic line."""
        parts = [f"{self.component}.{self.operation}"]
        if self.node is not None:
            parts.append(f"node={self.node}")
        if self.transaction_index is not None:
            parts.append(f"txn={self.transaction_index}")
        if self.seed is not None:
            parts.append(f"seed={self.seed}")
        if self.mutations:
            parts.append(f"mutations=[{', '.join(self.mutations)}]")
        return " ".join(parts)
