"""Diagnostic system for oracle failures.

Provides the exception hierarchy and the structured context attached to
each failure so a case can be replayed.

Python 3.13+. Zero external dependencies.
"""

from .codes import ErrorCategory, OracleContext
from .errors import (
    ConstructionError,
    EmptyCollectionError,
    ExecutionStatusMismatchError,
    ExpectedValueOverflowError,
    ModuleBuildError,
    OracleError,
    PackageBuildError,
    SourceGenerationError,
    TopologicalSortError,
)

__all__ = [
    "ConstructionError",
    "EmptyCollectionError",
    "ErrorCategory",
    "ExecutionStatusMismatchError",
    "ExpectedValueOverflowError",
    "ModuleBuildError",
    "OracleContext",
    "OracleError",
    "PackageBuildError",
    "SourceGenerationError",
    "TopologicalSortError",
]
