"""Dijkstra shortest path between two nodes.

Uses a linear scan over the unvisited nodes rather than a heap: the first
minimum found in node enumeration order wins a tie, which keeps traces
identical across runs. The scan order is the adjacency map order (node
creation order).
"""

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


def dijkstra_steps(graph: GraphModel, start_id: int, end_id: int) -> Iterator[TraceEvent]:
    """Yield visit events while exploring, then result events for the path.

    No result events are yielded when ``end_id`` cannot be reached. Each visit
    narrates the reachable unvisited nodes by tentative distance.
    """
    if start_id == end_id:
        yield TraceEvent.visit(ROOT_ID, start_id, StepTrace(
            message=f"Start and destination are the same (node {start_id})",
            data_structure=DataStructureState(
                kind=DataStructureKind.PRIORITY_QUEUE,
                processing=DataStructureItem(id=start_id, value=0),
            ),
        ))
        yield TraceEvent.result(ROOT_ID, start_id)
        return

    distances: dict[int, float] = {nid: math.inf for nid in graph.adjacency}
    distances[start_id] = 0
    distances.setdefault(end_id, math.inf)
    previous: dict[int, int] = {}
    # dict keeps enumeration order for the tie break
    unvisited: dict[int, None] = dict.fromkeys(distances)

    current = start_id
    while True:
        del unvisited[current]
        updated = []
        for edge in graph.adjacency.get(current, []):
            if edge.to_id in unvisited:
                candidate = distances[current] + edge.weight
                if candidate < distances.get(edge.to_id, math.inf):
                    distances[edge.to_id] = candidate
                    previous[edge.to_id] = current
                    updated.append(edge.to_id)

        if current == end_id:
            message = f"Found destination node {current}!"
            updated = []
        else:
            verb = "Starting at" if current == start_id else "Visiting"
            message = f"{verb} node {current}"
            if updated:
                message += f", updated {joined(updated)}"
        yield TraceEvent.visit(previous.get(current, ROOT_ID), current, StepTrace(
            message=message,
            data_structure=DataStructureState(
                kind=DataStructureKind.PRIORITY_QUEUE,
                items=keyed_items(distances, unvisited),
                processing=DataStructureItem(id=current, value=distances[current]),
                just_added=tuple(updated),
            ),
        ))

        if current == end_id:
            for from_id, to_id in _reconstruct_path(previous, start_id, end_id):
                yield TraceEvent.result(from_id, to_id)
            return

        next_node: int | None = None
        min_distance = math.inf
        for nid in unvisited:
            if distances[nid] < min_distance:
                min_distance = distances[nid]
                next_node = nid

        if next_node is None:
            logger.debug("Dijkstra exhausted reachable nodes before %d", end_id)
            return
        current = next_node


def _reconstruct_path(previous: dict[int, int], start_id: int, end_id: int) -> list[tuple[int, int]]:
    """Backtrack predecessor links from end to start, then reverse."""
    order = [end_id]
    while order[-1] in previous:
        order.append(previous[order[-1]])
    order.reverse()

    path = [(ROOT_ID, start_id)]
    path.extend(zip(order, order[1:]))
    return path


def dijkstra(graph: GraphModel, start_id: int, end_id: int) -> AlgorithmResult:
    """Run Dijkstra. An empty ``result_edges`` means ``end_id`` is unreachable."""
    require_node(graph, start_id)
    result = AlgorithmResult.from_events(
        AlgorithmKind.DIJKSTRA, list(dijkstra_steps(graph, start_id, end_id)),
    )
    logger.debug("Dijkstra %d->%d path %s", start_id, end_id, result.path_nodes)
    return result


def path_weight(graph: GraphModel, result: AlgorithmResult) -> int | None:
    """Total weight of a result path, or None when there is no path."""
    if not result.result_edges:
        return None
    total = 0
    for ref in result.result_edges:
        if ref.is_root:
            continue
        edge = graph.get_edge(ref.from_id, ref.to_id)
        if edge is None:
            return None
        total += edge.weight
    return total
