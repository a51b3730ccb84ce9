"""Transaction and status types exchanged with the executor.

Defines the values the batch builder produces and the executor consumes:
    - ModuleId: Address-qualified module identity
    - PublishPackagePayload: Code publication or upgrade
    - EntryFunctionPayload: Call of a module's entry function
    - SignedTransaction: Payload bound to a sender and sequence number
    - TransactionStatus: Per-transaction outcome reported by the executor

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import StrEnum

from deporacle.constants import U64_MAX

__all__ = [
    "EntryFunctionPayload",
    "ModuleId",
    "PublishPackagePayload",
    "SignedTransaction",
    "StatusKind",
    "TransactionPayload",
    "TransactionStatus",
    "decode_u64",
    "encode_u64",
]

_SUCCESS_CODE = "EXECUTED"


def encode_u64(value: int) -> bytes:
    """Serialize a u64 argument as 8 little-endian bytes (BCS layout).

    Example:
        >>> encode_u64(23).hex()
        '1700000000000000'
    """
    if not 0 <= value <= U64_MAX:
        msg = f"Value {value} does not fit in u64"
        raise ValueError(msg)
    return struct.pack("<Q", value)


def decode_u64(data: bytes) -> int:
    """Inverse of ``encode_u64``."""
    if len(data) != 8:
        msg = f"u64 argument must be 8 bytes, got {len(data)}"
        raise ValueError(msg)
    (value,) = struct.unpack("<Q", data)
    return value


@dataclass(frozen=True, slots=True, order=True)
class ModuleId:
    """Identity of a module: owning account address plus module name.

    Attributes:
        address: 0x-prefixed hex account address
        name: Module identifier, unique within the graph
    """

    address: str
    name: str

    def __str__(self) -> str:
        return f"{self.address}::{self.name}"


@dataclass(frozen=True, slots=True)
class PublishPackagePayload:
    """Publish a package, or upgrade one already published at the same address.

    Attributes:
        metadata: Serialized package metadata from the package builder
        code: Compiled module bytecode, one entry per module
        upgrade: True when the owning account already published this package
    """

    metadata: bytes
    code: tuple[bytes, ...]
    upgrade: bool = False

    def signing_bytes(self) -> bytes:
        parts = [b"publish", b"\x01" if self.upgrade else b"\x00", self.metadata, *self.code]
        return b"".join(struct.pack("<I", len(part)) + part for part in parts)


@dataclass(frozen=True, slots=True)
class EntryFunctionPayload:
    """Invoke an entry function with serialized arguments.

    Attributes:
        module: Module declaring the function
        function: Entry function name
        args: Arguments, each BCS-serialized
        ty_args: Type arguments (always empty for generated modules)
    """

    module: ModuleId
    function: str
    args: tuple[bytes, ...]
    ty_args: tuple[str, ...] = ()

    def signing_bytes(self) -> bytes:
        parts = [
            b"entry",
            str(self.module).encode(),
            self.function.encode(),
            *(t.encode() for t in self.ty_args),
            *self.args,
        ]
        return b"".join(struct.pack("<I", len(part)) + part for part in parts)


type TransactionPayload = PublishPackagePayload | EntryFunctionPayload


@dataclass(frozen=True, slots=True)
class SignedTransaction:
    """A payload signed by its sender at a given sequence number.

    Attributes:
        sender: Address of the signing account
        sequence_number: Sender's sequence number when the transaction was signed
        payload: Publish or entry function payload
        signature: Digest binding sender, sequence number and payload
    """

    sender: str
    sequence_number: int
    payload: TransactionPayload
    signature: bytes = field(repr=False)

    def describe(self) -> str:
        """One-line summary used in logs and error messages."""
        match self.payload:
            case PublishPackagePayload(upgrade=upgrade):
                kind = "upgrade" if upgrade else "publish"
                return f"{kind} by {self.sender} seq={self.sequence_number}"
            case EntryFunctionPayload(module=module, function=function, args=args):
                rendered = ", ".join(str(decode_u64(arg)) for arg in args if len(arg) == 8)
                return f"call {module}::{function}({rendered}) seq={self.sequence_number}"
            case _:  # pragma: no cover
                msg = f"Unknown transaction payload: {self.payload!r}"
                raise TypeError(msg)


class StatusKind(StrEnum):
    """Whether the executor kept the transaction in the ledger."""

    KEEP = "keep"
    DISCARD = "discard"


@dataclass(frozen=True, slots=True)
class TransactionStatus:
    """Outcome of one transaction in a batch.

    Attributes:
        kind: KEEP if the transaction was applied, DISCARD otherwise
        code: ``"EXECUTED"`` on success, otherwise the failure or abort code

    Example:
        >>> TransactionStatus.success().is_success
        True
        >>> TransactionStatus.aborted(42).is_success
        False
    """

    kind: StatusKind
    code: str = _SUCCESS_CODE

    @classmethod
    def success(cls) -> TransactionStatus:
        return cls(StatusKind.KEEP, _SUCCESS_CODE)

    @classmethod
    def aborted(cls, abort_code: int) -> TransactionStatus:
        return cls(StatusKind.KEEP, f"ABORTED({abort_code})")

    @classmethod
    def discarded(cls, reason: str) -> TransactionStatus:
        return cls(StatusKind.DISCARD, reason)

    @property
    def is_success(self) -> bool:
        return self.kind == StatusKind.KEEP and self.code == _SUCCESS_CODE

    def __str__(self) -> str:
        return f"{self.kind}({self.code})"
