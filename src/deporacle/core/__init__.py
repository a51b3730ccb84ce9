"""Core utilities shared by the graph model and the generators.

Exports:
    Index: Raw sampled index resolved against a collection size
    is_valid_identifier: Module name validation
    is_valid_address: Account address validation

Python 3.13+.
"""

from .identifier_validation import is_valid_address, is_valid_identifier
from .index import Index

__all__ = ["Index", "is_valid_address", "is_valid_identifier"]
