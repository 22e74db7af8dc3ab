"""Shared test fixtures for graphtrace tests."""

import pytest

from graphtrace.config import Config, GraphConfig, HistoryConfig, PlaybackConfig
from graphtrace.graph import GraphModel
from graphtrace.models import EdgeKind
from graphtrace.store import GraphStore
from graphtrace.timers import VirtualClock

D = EdgeKind.DIRECTED
U = EdgeKind.UNDIRECTED


def build_graph(node_count: int, edges: list[tuple]) -> GraphModel:
    """Nodes 1..node_count, then edges as (from, to, weight[, kind]) added in order.

    Kind defaults to undirected.
    """
    graph = GraphModel()
    for i in range(node_count):
        graph.add_node(i * 100.0, 0.0)
    for entry in edges:
        from_id, to_id, weight = entry[:3]
        kind = entry[3] if len(entry) > 3 else U
        assert graph.add_edge(from_id, to_id, kind, weight), f"could not add {entry}"
    return graph


@pytest.fixture()
def clock():
    return VirtualClock()


@pytest.fixture()
def config():
    return Config(
        graph=GraphConfig(node_radius=30.0),
        history=HistoryConfig(debounce_ms=300.0),
        playback=PlaybackConfig(speed_ms=400.0),
    )


@pytest.fixture()
def store(config, clock):
    """GraphStore driven by a virtual clock."""
    s = GraphStore(config, scheduler=clock)
    yield s
    s.close()


@pytest.fixture()
def diamond_store(store):
    """Store with 4 nodes: 1-2 (1), 1-3 (4), 2-4 (2), 3-4 (1), all undirected.

    History is cleared so tests start from an empty undo stack.
    """
    for i in range(4):
        store.add_node(i * 100.0, 50.0)
    store.add_edge(1, 2, U, 1)
    store.add_edge(1, 3, U, 4)
    store.add_edge(2, 4, U, 2)
    store.add_edge(3, 4, U, 1)
    store.history.clear()
    return store
