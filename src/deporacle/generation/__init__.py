"""Test-case generation: configuration, operations and generators.

Submodules:
    config - GraphConfig and SizeHints
    ops - Invoke / UpdateEdge and their translation into transactions
    sampler - Seeded generators independent of any testing library
    strategies - Hypothesis strategies (imported explicitly)

Python 3.13+.
"""

from .config import GraphConfig, SizeHints
from .ops import Invoke, LoaderTransactionGen, UpdateEdge, generate_txn
from .sampler import GeneratedCase, generate_case

__all__ = [
    "GeneratedCase",
    "GraphConfig",
    "Invoke",
    "LoaderTransactionGen",
    "SizeHints",
    "UpdateEdge",
    "generate_case",
    "generate_txn",
]
