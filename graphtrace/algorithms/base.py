"""Shared pieces of the algorithm modules."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from graphtrace.graph import GraphModel
from graphtrace.models import AlgorithmKind, DataStructureItem


@dataclass(frozen=True)
class AlgorithmInfo:
    """Metadata a caller needs before and after running an algorithm.

    ``failure_message`` is reported when a run comes back empty: no path for
    algorithms that need an end node, no tree otherwise.
    """
    kind: AlgorithmKind
    name: str
    tagline: str
    requires_end: bool = False
    undirected_only: bool = False
    rejects_negative_weights: bool = False
    failure_message: str = "Graph violates the requirements of the algorithm."


def require_node(graph: GraphModel, node_id: int | None, role: str = "start") -> int:
    """Fail fast on a caller bug: running from a node the graph does not have."""
    if node_id is None or not graph.has_node(node_id):
        raise ValueError(f"Unknown {role} node: {node_id}")
    return node_id


def joined(node_ids: Iterable[int]) -> str:
    return ", ".join(str(nid) for nid in node_ids)


def keyed_items(
    keys: Mapping[int, float],
    candidates: Iterable[int],
) -> tuple[DataStructureItem, ...]:
    """Priority-queue view: finite keys only, cheapest first, ties in candidate order."""
    finite = [nid for nid in candidates if keys.get(nid, math.inf) != math.inf]
    return tuple(
        DataStructureItem(id=nid, value=keys[nid])
        for nid in sorted(finite, key=lambda nid: keys[nid])
    )
