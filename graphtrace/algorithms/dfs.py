"""Depth-first traversal driven by an explicit stack."""

import logging
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


def dfs_steps(graph: GraphModel, start_id: int) -> Iterator[TraceEvent]:
    """Yield one visit event per discovered node, in pop order.

    Neighbours are pushed in adjacency insertion order and popped LIFO, so
    among siblings the last inserted edge is followed first. Nodes are marked
    seen when pushed. The narrated stack is listed bottom to top.
    """
    seen = {start_id}
    stack: list[tuple[int, int]] = [(ROOT_ID, start_id)]

    while stack:
        parent, node_id = stack.pop()
        pushed = []
        for edge in graph.adjacency.get(node_id, []):
            if edge.to_id not in seen:
                seen.add(edge.to_id)
                stack.append((node_id, edge.to_id))
                pushed.append(edge.to_id)

        message = f"Visiting node {node_id}"
        if pushed:
            message += f", pushed {joined(pushed)} to stack"
        yield TraceEvent.visit(parent, node_id, StepTrace(
            message=message,
            data_structure=DataStructureState(
                kind=DataStructureKind.STACK,
                items=tuple(DataStructureItem(id=nid) for _, nid in stack),
                processing=DataStructureItem(id=node_id),
                just_added=tuple(pushed),
            ),
        ))


def dfs(graph: GraphModel, start_id: int) -> AlgorithmResult:
    require_node(graph, start_id)
    result = AlgorithmResult.from_events(AlgorithmKind.DFS, list(dfs_steps(graph, start_id)))
    logger.debug("DFS from %d visited %s", start_id, result.visited_nodes)
    return result
