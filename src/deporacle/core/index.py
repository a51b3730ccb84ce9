"""Bounded index resolution.

An ``Index`` is a raw sampled integer that only becomes a position once it
is resolved against a collection. Generators draw indices without knowing
how many nodes the graph will have at the time the index is used, which
keeps generated cases shrinkable and replayable.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from deporacle.diagnostics import EmptyCollectionError

__all__ = ["Index"]


@dataclass(frozen=True, slots=True)
class Index:
    """A raw index resolved lazily against a collection size.

    Attributes:
        raw: Non-negative sampled integer

    Example:
        >>> Index(7).index(3)
        1
        >>> Index(7).get(["a", "b", "c"])
        'b'
    """

    raw: int

    def __post_init__(self) -> None:
        if self.raw < 0:
            msg = f"Index must be non-negative, got {self.raw}"
            raise ValueError(msg)

    def index(self, size: int) -> int:
        """Resolve to a position in a collection of ``size`` elements.

        Raises:
            EmptyCollectionError: If size is zero
        """
        if size <= 0:
            msg = f"Cannot resolve index {self.raw} against an empty collection"
            raise EmptyCollectionError(msg)
        return self.raw % size

    def get[T](self, items: Sequence[T]) -> T:
        """Return the element of ``items`` this index resolves to."""
        return items[self.index(len(items))]
