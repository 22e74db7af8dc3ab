"""Breadth-first traversal: explore the graph level by level from a start node."""

import logging
from collections import deque
from collections.abc import Iterator

from graphtrace.algorithms.base import joined, require_node
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


def bfs_steps(graph: GraphModel, start_id: int) -> Iterator[TraceEvent]:
    """Yield one visit event per discovered node, in dequeue order.

    Nodes are marked seen when enqueued, so each is visited at most once.
    Neighbours are expanded in adjacency insertion order. Each event narrates
    the queue as it stands after the node's neighbours were enqueued.
    """
    seen = {start_id}
    queue: deque[tuple[int, int]] = deque([(ROOT_ID, start_id)])

    while queue:
        parent, node_id = queue.popleft()
        added = []
        for edge in graph.adjacency.get(node_id, []):
            if edge.to_id not in seen:
                seen.add(edge.to_id)
                queue.append((node_id, edge.to_id))
                added.append(edge.to_id)

        message = f"Visiting node {node_id}"
        if added:
            message += f", added {joined(added)} to queue"
        yield TraceEvent.visit(parent, node_id, StepTrace(
            message=message,
            data_structure=DataStructureState(
                kind=DataStructureKind.QUEUE,
                items=tuple(DataStructureItem(id=nid) for _, nid in queue),
                processing=DataStructureItem(id=node_id),
                just_added=tuple(added),
            ),
        ))


def bfs(graph: GraphModel, start_id: int) -> AlgorithmResult:
    require_node(graph, start_id)
    result = AlgorithmResult.from_events(AlgorithmKind.BFS, list(bfs_steps(graph, start_id)))
    logger.debug("BFS from %d visited %s", start_id, result.visited_nodes)
    return result
