"""deporacle - randomized dependency-graph oracle for module loaders.

Generates a DAG of modules, computes the value each module's entry
function must return, and emits ordered publish, invoke and upgrade
transactions that check a module loader links and relinks dependencies
correctly.

Public API:
    DependencyGraph - Arena-backed DAG of modules
    LoaderHarness - Drives a graph through batches against an executor
    GraphConfig - Node range, edge-attempt range and seed for one case
    Index - Raw index resolved against a collection size
    Invoke, UpdateEdge - Loader operations
    calculate_expected_values - Expected-value oracle
    generate_case - Seeded case generation

Exceptions:
    OracleError - Base exception class
    ConstructionError - Invalid module identity
    ModuleBuildError - Source generation or package build failure
    TopologicalSortError - Cycle in the dependency graph
    ExecutionStatusMismatchError - Transaction did not succeed

Submodules:
    deporacle.generation.strategies - Hypothesis strategies
    deporacle.runtime - Accounts, transactions and collaborator protocols
"""

from .core import Index
from .diagnostics import (
    ConstructionError,
    ExecutionStatusMismatchError,
    ModuleBuildError,
    OracleError,
    TopologicalSortError,
)
from .generation import GraphConfig, Invoke, UpdateEdge, generate_case
from .graph import DependencyGraph, NodeSpec, calculate_expected_values
from .harness import LoaderHarness

try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _get_version
except ImportError as e:
    raise RuntimeError("importlib.metadata unavailable - Python version too old? " + str(e)) from e

try:
    __version__ = _get_version("deporacle")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "ConstructionError",
    "DependencyGraph",
    "ExecutionStatusMismatchError",
    "GraphConfig",
    "Index",
    "Invoke",
    "LoaderHarness",
    "ModuleBuildError",
    "NodeSpec",
    "OracleError",
    "TopologicalSortError",
    "UpdateEdge",
    "__version__",
    "calculate_expected_values",
    "generate_case",
]
