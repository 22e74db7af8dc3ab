"""Prim minimum spanning tree over an undirected graph."""

import logging
import math
from collections.abc import Iterator

from graphtrace.algorithms.base import joined, keyed_items, require_node
from graphtrace.graph import GraphModel
from graphtrace.models import (
    ROOT_ID,
    AlgorithmKind,
    AlgorithmResult,
    DataStructureItem,
    DataStructureKind,
    DataStructureState,
    StepTrace,
    TraceEvent,
)

logger = logging.getLogger(__name__)


def prim_steps(graph: GraphModel, start_id: int) -> Iterator[TraceEvent]:
    """Yield one visit event per node as it joins the tree.

    The first event is the start node with no parent; every later event is the
    cheapest frontier edge ``(parent -> node)`` at the time it was taken. The
    narrated frontier is keyed by the cheapest known edge into each node.
    Yields nothing on a graph holding any directed edge.
    """
    if graph.has_directed_edges():
        return

    key: dict[int, float] = {nid: math.inf for nid in graph.adjacency}
    key[start_id] = 0
    parent: dict[int, int] = {}
    in_tree: set[int] = set()

    for _ in range(len(graph.nodes)):
        min_node: int | None = None
        min_key = math.inf
        for nid, k in key.items():
            if nid not in in_tree and k < min_key:
                min_key = k
                min_node = nid

        if min_node is None:
            break

        in_tree.add(min_node)
        updated = []
        for edge in graph.adjacency.get(min_node, []):
            if edge.to_id not in in_tree and edge.weight < key.get(edge.to_id, math.inf):
                key[edge.to_id] = edge.weight
                parent[edge.to_id] = min_node
                updated.append(edge.to_id)

        if min_node in parent:
            message = f"Adding node {min_node} via edge {parent[min_node]}-{min_node} (weight {min_key:g})"
        else:
            message = f"Starting tree at node {min_node}"
        if updated:
            message += f", frontier updated {joined(updated)}"
        yield TraceEvent.visit(parent.get(min_node, ROOT_ID), min_node, StepTrace(
            message=message,
            data_structure=DataStructureState(
                kind=DataStructureKind.PRIORITY_QUEUE,
                items=keyed_items(key, (nid for nid in key if nid not in in_tree)),
                processing=DataStructureItem(id=min_node, value=min_key),
                just_added=tuple(updated),
            ),
        ))


def prim(graph: GraphModel, start_id: int) -> AlgorithmResult:
    """Run Prim from ``start_id``.

    An empty result means the tree is infeasible: the graph has directed edges
    or the start's component does not span every node.
    """
    require_node(graph, start_id)
    if graph.has_directed_edges():
        return AlgorithmResult(algorithm=AlgorithmKind.PRIM)

    events = list(prim_steps(graph, start_id))
    if len(events) != len(graph.nodes):
        logger.debug("Prim reached %d of %d nodes", len(events), len(graph.nodes))
        return AlgorithmResult(algorithm=AlgorithmKind.PRIM)

    return AlgorithmResult.from_events(AlgorithmKind.PRIM, events)


def tree_weight(graph: GraphModel, result: AlgorithmResult) -> int:
    total = 0
    for ref in result.visited_edges:
        if ref.is_root:
            continue
        edge = graph.get_edge(ref.from_id, ref.to_id)
        if edge is not None:
            total += edge.weight
    return total
