"""Tests for Invoke / UpdateEdge translation into transactions."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from deporacle.constants import U64_MAX
from deporacle.core import Index
from deporacle.diagnostics import ExpectedValueOverflowError
from deporacle.generation import Invoke, UpdateEdge, generate_txn
from deporacle.generation.strategies import dependency_graphs, indices
from deporacle.graph import DependencyGraph, calculate_expected_values
from deporacle.runtime import EntryFunctionPayload, PublishPackagePayload, decode_u64
from deporacle.runtime.batch import TransactionBatchBuilder
from tests.helpers.graphs import make_graph
from tests.helpers.toolchain import (
    ManifestPackageBuilder,
    ManifestSourceGenerator,
    decode_manifest,
)


def _batch(graph: DependencyGraph) -> TransactionBatchBuilder:
    calculate_expected_values(graph)
    return TransactionBatchBuilder(graph, ManifestSourceGenerator(), ManifestPackageBuilder())


class TestInvoke:
    def test_uses_cached_expected_value(self, workdir: Path) -> None:
        batch = _batch(make_graph([11, 7, 5], [(2, 1), (1, 0)], base_directory=workdir))
        txn = generate_txn(batch, Invoke(Index(5)))  # 5 % 3 = 2
        assert txn is not None
        assert isinstance(txn.payload, EntryFunctionPayload)
        assert txn.payload.module == batch.graph.node(2).module_id
        assert decode_u64(txn.payload.args[0]) == 23

    def test_recorded_in_mutation_history(self, workdir: Path) -> None:
        batch = _batch(make_graph([1], base_directory=workdir))
        generate_txn(batch, Invoke(Index(0)))
        assert batch.mutations == ["Invoke(0)"]


class TestUpdateEdge:
    def test_same_node_is_noop(self, workdir: Path) -> None:
        batch = _batch(make_graph([1, 2, 3], [(2, 0)], base_directory=workdir))
        before = batch.graph.edges()
        assert generate_txn(batch, UpdateEdge(Index(1), Index(4))) is None
        assert batch.graph.edges() == before
        assert [n.account.sequence_number for n in batch.graph.nodes] == [0, 0, 0]

    def test_add_edge_upgrades_only_dependent(self, workdir: Path) -> None:
        batch = _batch(make_graph([11, 7, 5], [(2, 1)], base_directory=workdir))
        batch.build_initial_batch()
        txn = generate_txn(batch, UpdateEdge(Index(0), Index(1)))
        assert txn is not None
        assert isinstance(txn.payload, PublishPackagePayload)
        assert txn.payload.upgrade
        assert txn.sender == batch.graph.node(1).account.address
        module, deps, self_value = decode_manifest(txn.payload.code[0])
        assert module == batch.graph.node(1).module_id
        assert deps == [batch.graph.node(0).module_id]
        assert self_value == 7

    def test_expected_values_recomputed_for_all(self, workdir: Path) -> None:
        batch = _batch(make_graph([11, 7, 5], [(2, 1)], base_directory=workdir))
        assert [n.expected_value for n in batch.graph.nodes] == [11, 7, 12]
        generate_txn(batch, UpdateEdge(Index(1), Index(0)))
        assert [n.expected_value for n in batch.graph.nodes] == [11, 18, 23]

    def test_remove_edge(self, workdir: Path) -> None:
        batch = _batch(make_graph([11, 7, 5], [(2, 1), (1, 0)], base_directory=workdir))
        txn = generate_txn(batch, UpdateEdge(Index(2), Index(1)))
        assert txn is not None
        assert batch.graph.edges() == [(1, 0)]
        assert batch.graph.node(2).expected_value == 5

    def test_overflowing_edge_reports_mutation_history(self, workdir: Path) -> None:
        batch = _batch(make_graph([U64_MAX, 1], base_directory=workdir))
        generate_txn(batch, Invoke(Index(0)))
        with pytest.raises(ExpectedValueOverflowError) as exc_info:
            generate_txn(batch, UpdateEdge(Index(1), Index(0)))
        context = exc_info.value.context
        assert context is not None
        assert context.node == str(batch.graph.node(1).module_id)
        assert context.mutations == ("Invoke(0)", "UpdateEdge(1, 0)")
        assert batch.graph.node(1).account.sequence_number == 0


class TestUpdateEdgeProperties:
    @given(graph=dependency_graphs(), raw=indices)
    def test_identical_indices_never_change_graph(
        self, graph: DependencyGraph, raw: Index
    ) -> None:
        """PROPERTY: UpdateEdge(i, i) emits nothing and changes nothing."""
        with graph:
            batch = _batch(graph)
            edges = graph.edges()
            values = [n.expected_value for n in graph.nodes]
            assert generate_txn(batch, UpdateEdge(raw, raw)) is None
            assert graph.edges() == edges
            assert [n.expected_value for n in graph.nodes] == values

    @given(graph=dependency_graphs(num_nodes=(2, 10)), lhs=indices, rhs=indices)
    def test_applying_twice_restores_state(
        self, graph: DependencyGraph, lhs: Index, rhs: Index
    ) -> None:
        """PROPERTY: UpdateEdge(a, b) twice restores edges and expected values.

        Holds whenever the pair is joined by at most one edge; with parallel
        edges each application removes one instance.
        """
        with graph:
            n = graph.node_count
            a, b = lhs.index(n), rhs.index(n)
            assume(graph.edges().count((max(a, b), min(a, b))) <= 1)
            batch = _batch(graph)
            edges = graph.edges()
            values = [node.expected_value for node in graph.nodes]

            generate_txn(batch, UpdateEdge(lhs, rhs))
            generate_txn(batch, UpdateEdge(lhs, rhs))

            assert graph.edges() == edges
            assert [node.expected_value for node in graph.nodes] == values

    @given(
        graph=dependency_graphs(),
        ops=st.lists(st.tuples(indices, indices), max_size=8),
    )
    def test_owner_sequence_numbers_consecutive(
        self, graph: DependencyGraph, ops: list[tuple[Index, Index]]
    ) -> None:
        """PROPERTY: Each owner signs with sequence numbers 0, 1, 2, ..."""
        with graph:
            batch = _batch(graph)
            seen: dict[str, list[int]] = {}
            txns = batch.build_initial_batch()
            for lhs, rhs in ops:
                txn = generate_txn(batch, UpdateEdge(lhs, rhs))
                if txn is not None:
                    txns.append(txn)
            for txn in txns:
                seen.setdefault(txn.sender, []).append(txn.sequence_number)
            for numbers in seen.values():
                assert numbers == list(range(len(numbers)))
