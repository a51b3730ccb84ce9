"""Accounts that sign transactions.

Each module-owning account, and the dedicated sender used for
invocations, holds its own sequence number. The number is read when a
transaction is signed and incremented afterwards, so each account's
transactions carry strictly consecutive sequence numbers.

Python 3.13+.
"""

from __future__ import annotations

import hashlib
import logging
import random
import secrets
from dataclasses import dataclass, field

from deporacle.constants import ADDRESS_LENGTH

from .transaction import SignedTransaction, TransactionPayload

__all__ = ["AccountData"]

logger = logging.getLogger(__name__)

# Scheme byte appended to the key when deriving an address.
_ADDRESS_SCHEME: bytes = b"\x00"


def _derive_address(key: bytes) -> str:
    digest = hashlib.sha3_256(key + _ADDRESS_SCHEME).digest()
    return "0x" + digest[:ADDRESS_LENGTH].hex()


@dataclass(slots=True)
class AccountData:
    """An account with key material, balance and a sequence counter.

    Mutability Note:
        Intentionally mutable (not frozen=True): ``sequence_number`` advances
        each time the account signs.

    Attributes:
        key: 32 bytes of signing key material
        balance: Initial balance registered with the executor
        sequence_number: Sequence number of the next transaction to sign
        address: Derived from ``key``
    """

    key: bytes = field(repr=False)
    balance: int
    sequence_number: int = 0
    address: str = field(init=False)

    def __post_init__(self) -> None:
        if len(self.key) != 32:
            msg = f"Account key must be 32 bytes, got {len(self.key)}"
            raise ValueError(msg)
        if self.balance < 0 or self.sequence_number < 0:
            msg = "balance and sequence_number must be non-negative"
            raise ValueError(msg)
        self.address = _derive_address(self.key)

    @classmethod
    def new(
        cls,
        balance: int,
        sequence_number: int = 0,
        rng: random.Random | None = None,
    ) -> AccountData:
        """Create an account with fresh key material.

        Args:
            balance: Initial balance
            sequence_number: Initial sequence number
            rng: Seeded generator for reproducible keys (default: OS entropy)
        """
        key = rng.randbytes(32) if rng is not None else secrets.token_bytes(32)
        return cls(key=key, balance=balance, sequence_number=sequence_number)

    def increment_sequence_number(self) -> None:
        self.sequence_number += 1

    def sign(self, payload: TransactionPayload) -> SignedTransaction:
        """Sign ``payload`` at the current sequence number and advance it."""
        digest = hashlib.sha3_256()
        digest.update(self.key)
        digest.update(self.address.encode())
        digest.update(self.sequence_number.to_bytes(8, "little"))
        digest.update(payload.signing_bytes())
        txn = SignedTransaction(
            sender=self.address,
            sequence_number=self.sequence_number,
            payload=payload,
            signature=digest.digest(),
        )
        self.increment_sequence_number()
        logger.debug("Signed %s", txn.describe())
        return txn
