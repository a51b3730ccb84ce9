"""Seeded, library-independent generators.

Every sampler implements ``generate(rng, hints)``: given a ``random.Random``
and the case's ``SizeHints`` it returns one instance. Larger samplers are
composed from smaller ones (indices, integer ranges, name patterns, lists,
weighted choices), so a whole test case can be rebuilt from a
``GraphConfig`` seed without a property-testing library:

    >>> config = GraphConfig(num_nodes=(2, 5), seed=11)
    >>> case = generate_case(config, num_ops=5)
    >>> case.seed
    11

The Hypothesis strategies in ``deporacle.generation.strategies`` cover the
same shapes with shrinking.

Python 3.13+.
"""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from deporacle.constants import (
    INVOKE_WEIGHT,
    MAX_SELF_VALUE,
    MODULE_NAME_LENGTH,
    UPDATE_EDGE_WEIGHT,
)
from deporacle.core import Index
from deporacle.graph import DependencyGraph, NodeSpec
from deporacle.runtime.account import AccountData

from .config import GraphConfig, SizeHints
from .ops import Invoke, LoaderTransactionGen, UpdateEdge

__all__ = [
    "AccountSampler",
    "EdgeAttemptSampler",
    "GeneratedCase",
    "IndexSampler",
    "IntRangeSampler",
    "ListSampler",
    "MapSampler",
    "NamePatternSampler",
    "NodeSpecSampler",
    "OpSampler",
    "Sampler",
    "WeightedChoice",
    "generate_case",
]

logger = logging.getLogger(__name__)

# Unique-element draws give up after this many consecutive duplicates.
_MAX_UNIQUE_RETRIES: int = 1000


class Sampler[T](Protocol):
    """Generates one instance from a seeded generator."""

    def generate(self, rng: random.Random, hints: SizeHints) -> T: ...


@dataclass(frozen=True, slots=True)
class IndexSampler:
    """Raw 64-bit index, resolved later against a collection size."""

    bits: int = 64

    def generate(self, rng: random.Random, hints: SizeHints) -> Index:
        return Index(rng.getrandbits(self.bits))


@dataclass(frozen=True, slots=True)
class IntRangeSampler:
    """Integer in the inclusive range ``[low, high]``."""

    low: int
    high: int

    def generate(self, rng: random.Random, hints: SizeHints) -> int:
        return rng.randint(self.low, self.high)


@dataclass(frozen=True, slots=True)
class NamePatternSampler:
    """Fixed-length string over an alphabet, e.g. ``[a-z]{10}``."""

    length: int = MODULE_NAME_LENGTH
    alphabet: str = string.ascii_lowercase

    def generate(self, rng: random.Random, hints: SizeHints) -> str:
        return "".join(rng.choices(self.alphabet, k=self.length))


@dataclass(frozen=True, slots=True)
class MapSampler[T, U]:
    """Applies ``fn`` to the output of another sampler."""

    inner: Sampler[T]
    fn: Callable[[T], U]

    def generate(self, rng: random.Random, hints: SizeHints) -> U:
        return self.fn(self.inner.generate(rng, hints))


@dataclass(frozen=True, slots=True)
class ListSampler[T]:
    """List whose length is drawn from a half-open range.

    Attributes:
        element: Sampler for each element
        size: Picks the half-open length range from the hints
        unique_by: Key function; elements with a repeated key are redrawn
    """

    element: Sampler[T]
    size: Callable[[SizeHints], tuple[int, int]]
    unique_by: Callable[[T], object] | None = None

    def generate(self, rng: random.Random, hints: SizeHints) -> list[T]:
        low, high = self.size(hints)
        count = rng.randrange(low, high)
        if self.unique_by is None:
            return [self.element.generate(rng, hints) for _ in range(count)]

        items: list[T] = []
        keys: set[object] = set()
        retries = 0
        while len(items) < count:
            item = self.element.generate(rng, hints)
            key = self.unique_by(item)
            if key in keys:
                retries += 1
                if retries > _MAX_UNIQUE_RETRIES:
                    msg = f"Could not draw {count} unique elements"
                    raise ValueError(msg)
                continue
            retries = 0
            keys.add(key)
            items.append(item)
        return items


@dataclass(frozen=True, slots=True)
class WeightedChoice[T]:
    """Picks one of several samplers with relative weights."""

    choices: Sequence[tuple[int, Sampler[T]]]

    def generate(self, rng: random.Random, hints: SizeHints) -> T:
        weights = [weight for weight, _ in self.choices]
        [(_, sampler)] = rng.choices(self.choices, weights=weights, k=1)
        return sampler.generate(rng, hints)


@dataclass(frozen=True, slots=True)
class AccountSampler:
    """Account with a balance in ``[default_balance, 2 * default_balance)``."""

    def generate(self, rng: random.Random, hints: SizeHints) -> AccountData:
        balance = rng.randrange(hints.default_balance, hints.default_balance * 2)
        return AccountData.new(balance, 0, rng)


@dataclass(frozen=True, slots=True)
class NodeSpecSampler:
    """Module owner, u16 self value and ``[a-z]{10}`` name."""

    accounts: Sampler[AccountData] = field(default_factory=AccountSampler)
    self_values: Sampler[int] = field(default_factory=lambda: IntRangeSampler(0, MAX_SELF_VALUE))
    names: Sampler[str] = field(default_factory=NamePatternSampler)

    def generate(self, rng: random.Random, hints: SizeHints) -> NodeSpec:
        return NodeSpec(
            account=self.accounts.generate(rng, hints),
            self_value=self.self_values.generate(rng, hints),
            name=self.names.generate(rng, hints),
        )


@dataclass(frozen=True, slots=True)
class EdgeAttemptSampler:
    """Pair of raw indices naming two modules."""

    def generate(self, rng: random.Random, hints: SizeHints) -> tuple[Index, Index]:
        index = IndexSampler()
        return index.generate(rng, hints), index.generate(rng, hints)


@dataclass(frozen=True, slots=True)
class OpSampler:
    """Loader operation, ``Invoke`` nine times as often as ``UpdateEdge``."""

    invoke_weight: int = INVOKE_WEIGHT
    update_edge_weight: int = UPDATE_EDGE_WEIGHT

    def generate(self, rng: random.Random, hints: SizeHints) -> LoaderTransactionGen:
        choice: WeightedChoice[LoaderTransactionGen] = WeightedChoice(
            (
                (self.invoke_weight, MapSampler(IndexSampler(), Invoke)),
                (
                    self.update_edge_weight,
                    MapSampler(EdgeAttemptSampler(), lambda pair: UpdateEdge(*pair)),
                ),
            )
        )
        return choice.generate(rng, hints)


@dataclass(slots=True)
class GeneratedCase:
    """Everything needed to replay one test case.

    Attributes:
        seed: Seed the case was generated from
        node_specs: Modules in creation order
        edge_attempts: Raw index pairs for graph construction
        sender_account: Account signing invoke transactions
        ops: Loader operations applied after the initial batch
    """

    seed: int
    node_specs: list[NodeSpec]
    edge_attempts: list[tuple[Index, Index]]
    sender_account: AccountData
    ops: list[LoaderTransactionGen]

    def build_graph(self, base_directory: Path | None = None) -> DependencyGraph:
        """Construct the case's graph. Call once: accounts are shared, not copied."""
        return DependencyGraph.create(
            self.node_specs,
            self.edge_attempts,
            sender_account=self.sender_account,
            base_directory=base_directory,
            seed=self.seed,
        )


def generate_case(config: GraphConfig, num_ops: int = 0) -> GeneratedCase:
    """Draw a complete test case from ``config``.

    The same configuration and ``num_ops`` always produce the same case.
    """
    rng = config.rng()
    hints = config.size_hints()

    specs = ListSampler(
        NodeSpecSampler(),
        size=lambda h: h.num_nodes,
        unique_by=lambda spec: spec.name,
    ).generate(rng, hints)
    edges = ListSampler(
        EdgeAttemptSampler(),
        size=lambda h: h.num_edge_attempts,
    ).generate(rng, hints)
    sender = AccountData.new(config.default_balance, 0, rng)
    ops = [OpSampler().generate(rng, hints) for _ in range(num_ops)]

    logger.debug(
        "Generated case seed=%d: %d modules, %d edge attempts, %d ops",
        config.seed,
        len(specs),
        len(edges),
        len(ops),
    )
    return GeneratedCase(
        seed=config.seed,
        node_specs=specs,
        edge_attempts=edges,
        sender_account=sender,
        ops=ops,
    )
