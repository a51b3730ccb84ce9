"""Module identity validation.

Single source of truth for the identifier and address grammar accepted by
the graph model. Invalid identities are rejected at construction time so
that a malformed name never reaches the source generator.

Move Identifier Grammar:
    [a-zA-Z_][a-zA-Z0-9_]*

    - A lone underscore is not a valid identifier
    - Length: Maximum 255 characters

Account Address Grammar:
    0x followed by exactly 64 lowercase hex digits

Thread Safety:
    All functions in this module are pure functions with no shared state.

Python 3.13+.
"""

from __future__ import annotations

import re

from deporacle.constants import ADDRESS_LENGTH, MAX_IDENTIFIER_LENGTH

__all__ = [
    "is_valid_address",
    "is_valid_identifier",
]

_IDENTIFIER_PATTERN: re.Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_ADDRESS_PATTERN: re.Pattern[str] = re.compile(rf"^0x[0-9a-f]{{{ADDRESS_LENGTH * 2}}}$")


def is_valid_identifier(name: str) -> bool:
    """Check whether ``name`` is a valid module identifier.

    Example:
        >>> is_valid_identifier("abcdefghij")
        True
        >>> is_valid_identifier("_")
        False
        >>> is_valid_identifier("9lives")
        False
    """
    if not name or len(name) > MAX_IDENTIFIER_LENGTH or name == "_":
        return False
    return _IDENTIFIER_PATTERN.match(name) is not None


def is_valid_address(address: str) -> bool:
    """Check whether ``address`` is a canonical 0x-prefixed account address."""
    return _ADDRESS_PATTERN.match(address) is not None
