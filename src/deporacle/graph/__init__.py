"""Dependency graph model and expected-value oracle.

Python 3.13+.
"""

from .model import DependencyGraph, EdgeMutation, ModuleNode, NodeSpec
from .oracle import calculate_expected_values, expected_value_violations

__all__ = [
    "DependencyGraph",
    "EdgeMutation",
    "ModuleNode",
    "NodeSpec",
    "calculate_expected_values",
    "expected_value_violations",
]
