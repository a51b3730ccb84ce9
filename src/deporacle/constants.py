"""Shared constants for deporacle.

Centralized values used by the graph model, the batch builder and the
generators. Placing them here avoids circular imports between the
``graph``, ``runtime`` and ``generation`` packages.

Constants are grouped by domain:
- Accounts: Balances funding module owners and the invocation sender
- Modules: Function names and abort code baked into generated packages
- Generation: Value widths, name patterns and operation weights

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Accounts
    "DEFAULT_BALANCE",
    "ADDRESS_LENGTH",
    # Modules
    "PUBLIC_FUNCTION_NAME",
    "ENTRY_FUNCTION_NAME",
    "EXPECTED_VALUE_ABORT_CODE",
    "MAX_IDENTIFIER_LENGTH",
    "U64_MAX",
    # Generation
    "MAX_SELF_VALUE",
    "MODULE_NAME_PATTERN",
    "MODULE_NAME_LENGTH",
    "INVOKE_WEIGHT",
    "UPDATE_EDGE_WEIGHT",
]

# ============================================================================
# ACCOUNTS
# ============================================================================

# Module owners are funded with a balance drawn from
# [DEFAULT_BALANCE, 2 * DEFAULT_BALANCE); the sender gets exactly DEFAULT_BALANCE.
DEFAULT_BALANCE: int = 1_000_000_000

# Account addresses are 32 bytes, rendered as 0x-prefixed lowercase hex.
ADDRESS_LENGTH: int = 32

# ============================================================================
# MODULES
# ============================================================================

# Every generated package exposes `public fun foo(): u64` returning
# self value + sum of dependency calls, and `public entry fun foo_entry(u64)`
# asserting the computed value against its argument.
PUBLIC_FUNCTION_NAME: str = "foo"
ENTRY_FUNCTION_NAME: str = "foo_entry"

# Abort code raised by foo_entry when the computed value differs.
EXPECTED_VALUE_ABORT_CODE: int = 42

# Move identifiers longer than this are rejected at graph construction.
MAX_IDENTIFIER_LENGTH: int = 255

U64_MAX: int = 2**64 - 1

# ============================================================================
# GENERATION
# ============================================================================

# Generated self values are u16. Sums still grow with the number of paths
# between modules, so the oracle checks every expected value against U64_MAX.
MAX_SELF_VALUE: int = 2**16 - 1

MODULE_NAME_PATTERN: str = r"[a-z]{10}"
MODULE_NAME_LENGTH: int = 10

# Invocations are drawn nine times as often as structural edits.
INVOKE_WEIGHT: int = 9
UPDATE_EDGE_WEIGHT: int = 1
