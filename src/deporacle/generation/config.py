"""Test-case configuration.

Provides a single frozen dataclass describing how one dependency graph
test case is generated: how many modules, how many edge attempts, and the
seed that makes the case replayable.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from deporacle.constants import DEFAULT_BALANCE

__all__ = ["GraphConfig", "SizeHints"]


@dataclass(frozen=True, slots=True)
class SizeHints:
    """Size ranges handed to generators.

    Ranges are half-open ``(low, high)`` pairs: ``low <= n < high``.

    Attributes:
        num_nodes: Range for the number of modules
        num_edge_attempts: Range for the number of edge attempts
        default_balance: Lower bound of module owner balances
    """

    num_nodes: tuple[int, int]
    num_edge_attempts: tuple[int, int]
    default_balance: int = DEFAULT_BALANCE


def _check_range(name: str, bounds: tuple[int, int], minimum: int) -> None:
    low, high = bounds
    if low < minimum:
        msg = f"{name} lower bound must be at least {minimum}, got {low}"
        raise ValueError(msg)
    if high <= low:
        msg = f"{name} range ({low}, {high}) is empty"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class GraphConfig:
    """Immutable configuration for generating one dependency graph.

    Attributes:
        num_nodes: Half-open range for the module count (default: (1, 10)).
            The lower bound must be positive: indices are resolved against
            the node count, which therefore can never be zero.
        num_edge_attempts: Half-open range for the number of edge attempts
            (default: (0, 20)). Attempts that resolve to one node are
            skipped, so the edge count can be smaller.
        seed: Seed for the case's random generator (default: 0)
        default_balance: Lower bound of module owner balances; owners get a
            balance in ``[default_balance, 2 * default_balance)`` and the
            sender gets exactly ``default_balance``.

    Example:
        >>> config = GraphConfig(num_nodes=(3, 6), num_edge_attempts=(0, 10), seed=7)
        >>> config.rng().random() == GraphConfig(seed=7).rng().random()
        True
    """

    num_nodes: tuple[int, int] = (1, 10)
    num_edge_attempts: tuple[int, int] = (0, 20)
    seed: int = 0
    default_balance: int = DEFAULT_BALANCE

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If a range is empty, the node range admits zero
                nodes, edge attempts can be negative, or the balance is
                not positive.
        """
        _check_range("num_nodes", self.num_nodes, 1)
        _check_range("num_edge_attempts", self.num_edge_attempts, 0)
        if self.default_balance <= 0:
            msg = "default_balance must be positive"
            raise ValueError(msg)

    def rng(self) -> random.Random:
        """Fresh generator seeded from this configuration."""
        return random.Random(self.seed)

    def size_hints(self) -> SizeHints:
        return SizeHints(
            num_nodes=self.num_nodes,
            num_edge_attempts=self.num_edge_attempts,
            default_balance=self.default_balance,
        )
