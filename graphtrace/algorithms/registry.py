"""Algorithm registry and dispatch for BFS, DFS, Dijkstra and Prim."""

import logging

from graphtrace.algorithms.base import AlgorithmInfo, require_node
from graphtrace.algorithms.bfs import bfs
from graphtrace.algorithms.dfs import dfs
from graphtrace.algorithms.dijkstra import dijkstra
from graphtrace.algorithms.prim import prim
from graphtrace.graph import GraphModel
from graphtrace.models import AlgorithmKind, AlgorithmParams, AlgorithmResult

logger = logging.getLogger(__name__)

ALGORITHMS: dict[AlgorithmKind, AlgorithmInfo] = {
    AlgorithmKind.BFS: AlgorithmInfo(
        kind=AlgorithmKind.BFS,
        name="BFS",
        tagline="Explore level by level",
    ),
    AlgorithmKind.DFS: AlgorithmInfo(
        kind=AlgorithmKind.DFS,
        name="DFS",
        tagline="Dive deep, then backtrack",
    ),
    AlgorithmKind.DIJKSTRA: AlgorithmInfo(
        kind=AlgorithmKind.DIJKSTRA,
        name="Dijkstra's",
        tagline="Find the shortest path",
        requires_end=True,
        rejects_negative_weights=True,
        failure_message="Path is not possible for the given vertices.",
    ),
    AlgorithmKind.PRIM: AlgorithmInfo(
        kind=AlgorithmKind.PRIM,
        name="Prim's MST",
        tagline="Build minimum spanning tree",
        undirected_only=True,
        failure_message="Graph is not connected. MST requires a connected graph.",
    ),
}


def describe(kind: AlgorithmKind | str) -> str:
    """One-line summary used by the CLI help and the MCP listing."""
    info = ALGORITHMS[AlgorithmKind(kind)]
    needs = "start and end node" if info.requires_end else "start node"
    return f"{info.name}: {info.tagline} ({needs})"


def _refused(info: AlgorithmInfo, message: str) -> AlgorithmResult:
    logger.warning("%s refused: %s", info.name, message)
    return AlgorithmResult(algorithm=info.kind, error=message)


def run_algorithm(
    kind: AlgorithmKind | str,
    graph: GraphModel,
    params: AlgorithmParams,
) -> AlgorithmResult:
    """Run one algorithm and return its result.

    Raises ValueError for caller bugs (unknown kind, unknown start node,
    Dijkstra without an end node). Infeasible runs come back as an empty
    result with ``error`` set from the registry entry.
    """
    kind = AlgorithmKind(kind)
    info = ALGORITHMS[kind]
    require_node(graph, params.start_id)
    if info.requires_end and params.end_id is None:
        raise ValueError(f"{info.name} requires an end node")

    if info.undirected_only and graph.has_directed_edges():
        return _refused(info, f"{info.name} requires an undirected graph. Found directed edges.")
    if info.rejects_negative_weights and graph.has_negative_weights():
        return _refused(info, f"{info.name} doesn't support negative edge weights.")

    if kind == AlgorithmKind.BFS:
        result = bfs(graph, params.start_id)
    elif kind == AlgorithmKind.DFS:
        result = dfs(graph, params.start_id)
    elif kind == AlgorithmKind.DIJKSTRA:
        result = dijkstra(graph, params.start_id, params.end_id)
    else:
        result = prim(graph, params.start_id)

    produced = result.result_edges if info.requires_end else result.visited_edges
    if not produced:
        result.error = info.failure_message

    logger.info(
        "%s from %d: %d visited, %d result edges%s",
        info.name, params.start_id, len(result.visited_edges), len(result.result_edges),
        f" ({result.error})" if result.error else "",
    )
    return result
