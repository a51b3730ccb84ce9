"""Accounts, transactions, collaborator interfaces and batch building.

Python 3.13+.
"""

from .account import AccountData
from .protocols import BuiltPackage, Executor, ModuleSourceGenerator, PackageBuilder
from .transaction import (
    EntryFunctionPayload,
    ModuleId,
    PublishPackagePayload,
    SignedTransaction,
    StatusKind,
    TransactionStatus,
    decode_u64,
    encode_u64,
)

__all__ = [
    "AccountData",
    "BuiltPackage",
    "EntryFunctionPayload",
    "Executor",
    "ModuleId",
    "ModuleSourceGenerator",
    "PackageBuilder",
    "PublishPackagePayload",
    "SignedTransaction",
    "StatusKind",
    "TransactionStatus",
    "decode_u64",
    "encode_u64",
]
