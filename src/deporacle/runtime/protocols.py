"""Interfaces of the external collaborators.

The oracle never generates module source, compiles it or executes
transactions itself. It drives these collaborators through the protocols
below, so any conforming implementation (a real toolchain, or an in-memory
simulation in tests) can be plugged in.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from .account import AccountData
from .transaction import ModuleId, SignedTransaction, TransactionStatus

__all__ = [
    "BuiltPackage",
    "Executor",
    "ModuleSourceGenerator",
    "PackageBuilder",
]


@dataclass(frozen=True, slots=True)
class BuiltPackage:
    """Result of building a generated package.

    Attributes:
        code: Compiled module bytecode
        metadata: Serialized package metadata
    """

    code: tuple[bytes, ...]
    metadata: bytes


@runtime_checkable
class ModuleSourceGenerator(Protocol):
    """Writes a package for one module and returns its location.

    The package's public function returns ``self_value`` plus the result of
    calling each dependency's public function, once per listed dependency.
    Its entry function aborts unless that sum equals its argument.
    Output must be deterministic for identical inputs.
    """

    def generate(
        self,
        base_directory: Path,
        module: ModuleId,
        dependencies: Sequence[ModuleId],
        self_value: int,
    ) -> Path: ...


@runtime_checkable
class PackageBuilder(Protocol):
    """Compiles a generated package into bytecode and metadata."""

    def build(self, package_path: Path) -> BuiltPackage: ...


@runtime_checkable
class Executor(Protocol):
    """Applies a batch of transactions to ledger state.

    ``execute_block`` blocks until every transaction has an outcome and
    returns one status per transaction, in submission order.
    """

    def add_account_data(self, account: AccountData) -> None: ...

    def execute_block(
        self, transactions: Sequence[SignedTransaction]
    ) -> list[TransactionStatus]: ...
