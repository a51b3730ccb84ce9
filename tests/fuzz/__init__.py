"""Fuzz tests for deporacle.

This package contains:
- test_loader_state_machine: Stateful fuzzer driving a dependency graph
  against the simulated ledger one operation at a time

Run with:
    pytest -m fuzz

Python 3.13+.
"""
