"""Tests for GraphModel mutation primitives and invariants."""

from graphtrace.graph import GraphModel
from graphtrace.models import Edge, EdgeKind, Snapshot

from conftest import D, U, build_graph


def _assert_mirror_invariant(graph: GraphModel) -> None:
    for edge in graph.all_edges():
        mirror = graph.get_edge(edge.to_id, edge.from_id)
        if edge.is_undirected:
            assert mirror is not None, f"missing mirror for {edge}"
            assert mirror.weight == edge.weight
            assert mirror.kind == EdgeKind.UNDIRECTED
        elif mirror is not None:
            assert mirror.kind == EdgeKind.DIRECTED


class TestNodes:
    def test_add_node_assigns_monotonic_ids(self):
        graph = GraphModel()
        nodes = [graph.add_node(0, 0), graph.add_node(50, 50), graph.add_node(100, 100)]
        assert [n.id for n in nodes] == [1, 2, 3]
        assert graph.next_id == 3
        assert set(graph.adjacency) == {1, 2, 3}
        assert all(graph.adjacency[n.id] == [] for n in nodes)

    def test_add_node_uses_radius(self):
        graph = GraphModel(node_radius=12.5)
        assert graph.add_node(1, 2).r == 12.5

    def test_ids_not_reused_after_delete(self):
        graph = GraphModel()
        graph.add_node(0, 0)
        graph.add_node(0, 0)
        graph.delete_node(2)
        assert graph.add_node(0, 0).id == 3

    def test_delete_node_removes_incoming_and_outgoing(self):
        graph = build_graph(3, [(1, 2, 1, D), (3, 2, 1, D), (2, 3, 5, D)])
        assert graph.delete_node(2)
        assert graph.node_ids() == [1, 3]
        assert 2 not in graph.adjacency
        assert graph.edges_from(1) == []
        assert graph.edges_from(3) == []

    def test_delete_missing_node_is_noop(self):
        graph = build_graph(2, [(1, 2, 1)])
        before = graph.snapshot()
        assert not graph.delete_node(42)
        assert graph.snapshot() == before

    def test_move_node(self):
        graph = GraphModel()
        graph.add_node(0, 0)
        moved = graph.move_node(1, 10, 20)
        assert (moved.x, moved.y) == (10, 20)
        assert graph.get_node(1).x == 10

    def test_move_missing_node(self):
        assert GraphModel().move_node(7, 1, 1) is None


class TestAddEdge:
    def test_directed_has_no_mirror(self):
        graph = build_graph(2, [(1, 2, 3, D)])
        assert graph.get_edge(1, 2).weight == 3
        assert graph.get_edge(2, 1) is None

    def test_undirected_inserts_mirror(self):
        graph = build_graph(2, [(1, 2, 7, U)])
        mirror = graph.get_edge(2, 1)
        assert mirror == Edge(from_id=2, to_id=1, weight=7, kind=EdgeKind.UNDIRECTED)
        _assert_mirror_invariant(graph)

    def test_rejects_self_loop(self):
        graph = build_graph(1, [])
        assert not graph.add_edge(1, 1)
        assert graph.edges_from(1) == []

    def test_rejects_duplicate(self):
        graph = build_graph(2, [(1, 2, 1, D)])
        assert not graph.add_edge(1, 2, D, 9)
        assert len(graph.edges_from(1)) == 1
        assert graph.get_edge(1, 2).weight == 1

    def test_rejects_unknown_nodes(self):
        graph = build_graph(1, [])
        assert not graph.add_edge(1, 5)
        assert not graph.add_edge(5, 1)
        assert graph.all_edges() == []

    def test_undirected_rejected_when_mirror_slot_taken(self):
        graph = build_graph(2, [(2, 1, 4, D)])
        assert not graph.add_edge(1, 2, U, 1)
        assert graph.get_edge(1, 2) is None
        assert graph.get_edge(2, 1).kind == EdgeKind.DIRECTED

    def test_adjacency_keeps_insertion_order(self):
        graph = build_graph(4, [(1, 3, 1, D), (1, 2, 1, D), (1, 4, 1, D)])
        assert [e.to_id for e in graph.edges_from(1)] == [3, 2, 4]


class TestEdgeUpdates:
    def test_directed_to_undirected_adds_mirror(self):
        graph = build_graph(2, [(1, 2, 5, D)])
        assert graph.update_edge_kind(1, 2, U)
        assert graph.get_edge(1, 2).kind == EdgeKind.UNDIRECTED
        assert graph.get_edge(2, 1).weight == 5
        _assert_mirror_invariant(graph)

    def test_toggle_round_trip_restores_single_edge(self):
        graph = build_graph(2, [(1, 2, 5, D)])
        original = graph.snapshot()
        graph.update_edge_kind(1, 2, U)
        graph.update_edge_kind(1, 2, D)
        assert graph.snapshot() == original

    def test_opposite_directed_edge_becomes_mirror(self):
        graph = build_graph(2, [(1, 2, 5, D), (2, 1, 9, D)])
        assert graph.update_edge_kind(1, 2, U)
        assert len(graph.edges_from(2)) == 1
        assert graph.get_edge(2, 1).weight == 5
        _assert_mirror_invariant(graph)

    def test_kind_update_noops(self):
        graph = build_graph(2, [(1, 2, 5, D)])
        assert not graph.update_edge_kind(1, 2, D)
        assert not graph.update_edge_kind(2, 1, U)

    def test_weight_updates_mirror(self):
        graph = build_graph(2, [(1, 2, 5, U)])
        assert graph.update_edge_weight(2, 1, 11)
        assert graph.get_edge(1, 2).weight == 11
        assert graph.get_edge(2, 1).weight == 11

    def test_weight_on_directed_leaves_other_direction(self):
        graph = build_graph(2, [(1, 2, 5, D), (2, 1, 3, D)])
        graph.update_edge_weight(1, 2, 8)
        assert graph.get_edge(2, 1).weight == 3

    def test_weight_missing_edge(self):
        assert not build_graph(2, []).update_edge_weight(1, 2, 4)

    def test_reverse_directed(self):
        graph = build_graph(2, [(1, 2, 6, D)])
        assert graph.reverse_edge(1, 2)
        assert graph.get_edge(1, 2) is None
        assert graph.get_edge(2, 1) == Edge(from_id=2, to_id=1, weight=6, kind=EdgeKind.DIRECTED)

    def test_reverse_undirected_is_rejected(self):
        graph = build_graph(2, [(1, 2, 6, U)])
        before = graph.snapshot()
        assert not graph.reverse_edge(1, 2)
        assert graph.snapshot() == before

    def test_reverse_rejected_when_it_would_duplicate(self):
        graph = build_graph(2, [(1, 2, 6, D), (2, 1, 1, D)])
        assert not graph.reverse_edge(1, 2)

    def test_delete_undirected_removes_mirror(self):
        graph = build_graph(3, [(1, 2, 1, U), (1, 3, 1, U)])
        assert graph.delete_edge(2, 1)
        assert graph.get_edge(1, 2) is None
        assert graph.get_edge(2, 1) is None
        assert graph.get_edge(1, 3) is not None

    def test_delete_missing_edge(self):
        assert not build_graph(2, []).delete_edge(1, 2)


class TestSnapshots:
    def test_snapshot_is_detached_from_later_edits(self):
        graph = build_graph(2, [(1, 2, 1, U)])
        snap = graph.snapshot()
        graph.update_edge_weight(1, 2, 99)
        graph.add_node(5, 5)
        assert dict(snap.edges)[1][0].weight == 1
        assert len(snap.nodes) == 2

    def test_restore_round_trip(self):
        graph = build_graph(3, [(1, 2, 1, U), (2, 3, 4, D)])
        snap = graph.snapshot()
        other = GraphModel.from_snapshot(snap)
        assert other.snapshot() == snap
        assert other.next_id == 3

    def test_json_uses_documented_keys(self):
        graph = build_graph(2, [(1, 2, 3, D)])
        raw = graph.snapshot().to_json()
        assert '"nextId"' in raw
        assert '"from"' in raw and '"to"' in raw
        assert Snapshot.from_json(raw) == graph.snapshot()

    def test_restore_creates_missing_adjacency_entries(self):
        snap = Snapshot.model_validate({
            "nodes": [{"id": 1, "x": 0, "y": 0}, {"id": 2, "x": 1, "y": 1}],
            "edges": [],
            "nextId": 2,
        })
        graph = GraphModel.from_snapshot(snap)
        assert set(graph.adjacency) == {1, 2}

    def test_has_directed_and_negative(self):
        graph = build_graph(3, [(1, 2, -2, U)])
        assert not graph.has_directed_edges()
        assert graph.has_negative_weights()
        graph.add_edge(2, 3, D, 1)
        assert graph.has_directed_edges()
