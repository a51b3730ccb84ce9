"""In-memory executor modelling a module loader.

``SimulatedLedger`` enforces sequence numbers, checks that published code
links against already-published dependencies, and evaluates entry
functions by resolving every call against the latest published code.
Upgrading a module therefore changes the result of every module that
calls it, which is exactly what the oracle predicts.

``stale_links=True`` models a loader bug: each module's resolved value is
cached on first call and never invalidated by upgrades.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from deporacle.constants import ENTRY_FUNCTION_NAME, EXPECTED_VALUE_ABORT_CODE
from deporacle.runtime import (
    AccountData,
    EntryFunctionPayload,
    ModuleId,
    PublishPackagePayload,
    SignedTransaction,
    StatusKind,
    TransactionStatus,
    decode_u64,
)

from .toolchain import decode_manifest


@dataclass(slots=True)
class _Module:
    dependencies: list[ModuleId]
    self_value: int


class SimulatedLedger:
    """Executor holding accounts and published modules in memory."""

    def __init__(self, *, stale_links: bool = False) -> None:
        self.sequence_numbers: dict[str, int] = {}
        self.balances: dict[str, int] = {}
        self.modules: dict[ModuleId, _Module] = {}
        self.blocks: list[list[SignedTransaction]] = []
        self._stale_links = stale_links
        self._link_cache: dict[ModuleId, int] = {}

    def add_account_data(self, account: AccountData) -> None:
        self.sequence_numbers[account.address] = account.sequence_number
        self.balances[account.address] = account.balance

    def execute_block(
        self, transactions: Sequence[SignedTransaction]
    ) -> list[TransactionStatus]:
        self.blocks.append(list(transactions))
        return [self._execute(txn) for txn in transactions]

    def _execute(self, txn: SignedTransaction) -> TransactionStatus:
        expected_seq = self.sequence_numbers.get(txn.sender)
        if expected_seq is None:
            return TransactionStatus.discarded("SENDING_ACCOUNT_DOES_NOT_EXIST")
        if txn.sequence_number != expected_seq:
            return TransactionStatus.discarded("SEQUENCE_NUMBER_MISMATCH")
        self.sequence_numbers[txn.sender] = expected_seq + 1

        match txn.payload:
            case PublishPackagePayload() as payload:
                return self._publish(txn.sender, payload)
            case EntryFunctionPayload() as payload:
                return self._invoke(payload)
        return TransactionStatus.discarded("UNKNOWN_PAYLOAD")

    def _publish(self, sender: str, payload: PublishPackagePayload) -> TransactionStatus:
        module, deps, self_value = decode_manifest(payload.code[0])
        if module.address != sender:
            return TransactionStatus(StatusKind.KEEP, "MODULE_ADDRESS_MISMATCH")
        if payload.upgrade != (module in self.modules):
            return TransactionStatus(StatusKind.KEEP, "PACKAGE_VERSION_MISMATCH")
        if any(dep not in self.modules for dep in deps):
            return TransactionStatus(StatusKind.KEEP, "LINKER_ERROR")
        self.modules[module] = _Module(deps, self_value)
        return TransactionStatus.success()

    def _invoke(self, payload: EntryFunctionPayload) -> TransactionStatus:
        if payload.module not in self.modules or payload.function != ENTRY_FUNCTION_NAME:
            return TransactionStatus(StatusKind.KEEP, "FUNCTION_RESOLUTION_FAILURE")
        if self._call(payload.module) != decode_u64(payload.args[0]):
            return TransactionStatus.aborted(EXPECTED_VALUE_ABORT_CODE)
        return TransactionStatus.success()

    def _call(self, module_id: ModuleId) -> int:
        if self._stale_links and module_id in self._link_cache:
            return self._link_cache[module_id]
        module = self.modules[module_id]
        value = module.self_value + sum(self._call(dep) for dep in module.dependencies)
        if self._stale_links:
            self._link_cache[module_id] = value
        return value

    def value_of(self, module_id: ModuleId) -> int:
        """Value the module's public function returns right now."""
        return self._call(module_id)
