"""Tests for the expected-value oracle."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from deporacle.constants import U64_MAX
from deporacle.diagnostics import ErrorCategory, ExpectedValueOverflowError
from deporacle.generation.strategies import dependency_graphs
from deporacle.graph import (
    DependencyGraph,
    calculate_expected_values,
    expected_value_violations,
)
from tests.helpers.graphs import make_graph


class TestScenarios:
    """Hand-computed graphs."""

    def test_chain(self, workdir: Path) -> None:
        """M1 -> M2 -> M3 with self values 5, 7, 11."""
        # Handles: M3 = 0, M2 = 1, M1 = 2.
        with make_graph([11, 7, 5], [(2, 1), (1, 0)], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [11, 18, 23]
            assert [node.expected_value for node in graph.nodes] == [11, 18, 23]

    def test_isolated_nodes(self, workdir: Path) -> None:
        with make_graph([4, 9], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [4, 9]

    def test_diamond(self, workdir: Path) -> None:
        """M1 -> M2, M1 -> M3, M2 -> M4, M3 -> M4, all self values 1."""
        # Handles: M4 = 0, M3 = 1, M2 = 2, M1 = 3.
        edges = [(3, 2), (3, 1), (2, 0), (1, 0)]
        with make_graph([1, 1, 1, 1], edges, base_directory=workdir) as graph:
            calculate_expected_values(graph)
            m4, m3, m2, m1 = (graph.node(h).expected_value for h in range(4))
            assert (m4, m2, m3, m1) == (1, 2, 2, 5)

    def test_parallel_edges_count_each_instance(self, workdir: Path) -> None:
        with make_graph([10, 1], [(1, 0), (1, 0)], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [10, 21]

    def test_recomputed_after_mutation(self, workdir: Path) -> None:
        with make_graph([11, 7, 5], [(2, 1), (1, 0)], base_directory=workdir) as graph:
            calculate_expected_values(graph)
            graph.mutate(1, 0)  # remove M2 -> M3
            assert calculate_expected_values(graph) == [11, 7, 12]

    def test_zero_self_values(self, workdir: Path) -> None:
        with make_graph([0, 0, 0], [(2, 0), (1, 0)], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [0, 0, 0]


class TestOverflow:
    """Expected values are entry function arguments and must fit in a u64."""

    def test_max_self_value_alone_fits(self, workdir: Path) -> None:
        with make_graph([U64_MAX], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [U64_MAX]

    def test_dependent_of_max_value_overflows(self, workdir: Path) -> None:
        with make_graph([U64_MAX, 1], [(1, 0)], base_directory=workdir) as graph:
            with pytest.raises(ExpectedValueOverflowError) as exc_info:
                calculate_expected_values(graph)
            error = exc_info.value
            assert error.value == U64_MAX + 1
            assert error.category == ErrorCategory.ORACLE
            assert error.context is not None
            assert error.context.node == str(graph.node(1).module_id)
            assert error.context.seed == 0

    def test_parallel_edges_overflow(self, workdir: Path) -> None:
        with make_graph([2**63, 0], [(1, 0), (1, 0)], base_directory=workdir) as graph:
            with pytest.raises(ExpectedValueOverflowError, match="does not fit in u64"):
                calculate_expected_values(graph)

    def test_overflow_leaves_cached_values_untouched(self, workdir: Path) -> None:
        with make_graph([U64_MAX, 1], base_directory=workdir) as graph:
            assert calculate_expected_values(graph) == [U64_MAX, 1]
            graph.mutate(1, 0)
            with pytest.raises(ExpectedValueOverflowError):
                calculate_expected_values(graph, ["UpdateEdge(1, 0)"])
            assert [node.expected_value for node in graph.nodes] == [U64_MAX, 1]


class TestExpectedValueViolations:
    def test_fresh_graph_inconsistent_until_computed(self, workdir: Path) -> None:
        with make_graph([2, 3], [(1, 0)], base_directory=workdir) as graph:
            assert expected_value_violations(graph) == [0, 1]
            calculate_expected_values(graph)
            assert expected_value_violations(graph) == []

    def test_stale_after_mutation(self, workdir: Path) -> None:
        with make_graph([2, 3], [(1, 0)], base_directory=workdir) as graph:
            calculate_expected_values(graph)
            graph.mutate(0, 1)
            assert expected_value_violations(graph) == [1]


class TestOracleProperties:
    @given(graph=dependency_graphs())
    def test_aggregation_rule_holds(self, graph: DependencyGraph) -> None:
        """PROPERTY: expected = self + sum of direct dependencies' expected."""
        with graph:
            calculate_expected_values(graph)
            assert expected_value_violations(graph) == []

    @given(
        graph=dependency_graphs(),
        pairs=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=20),
                st.integers(min_value=0, max_value=20),
            ),
            max_size=10,
        ),
    )
    def test_aggregation_rule_holds_after_mutations(
        self, graph: DependencyGraph, pairs: list[tuple[int, int]]
    ) -> None:
        """PROPERTY: The rule holds after every structural mutation."""
        with graph:
            calculate_expected_values(graph)
            for lhs, rhs in pairs:
                n = graph.node_count
                if graph.mutate(lhs % n, rhs % n) is not None:
                    calculate_expected_values(graph)
                assert expected_value_violations(graph) == []

    @given(graph=dependency_graphs())
    def test_leaves_equal_self_value(self, graph: DependencyGraph) -> None:
        """PROPERTY: A module without dependencies expects its own value."""
        with graph:
            calculate_expected_values(graph)
            for node in graph.nodes:
                if not graph.dependencies(node.handle):
                    assert node.expected_value == node.self_value
