#!/usr/bin/env python3
"""graphtrace MCP server: edit a graph, run algorithms and step through traces."""

import json
import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from graphtrace.algorithms.registry import ALGORITHMS, describe
from graphtrace.config import load_config
from graphtrace.models import EdgeKind
from graphtrace.player import PlaybackMode
from graphtrace.store import GraphStore
from graphtrace.timers import AsyncioScheduler

mcp = FastMCP("graphtrace")
logger = logging.getLogger(__name__)

# Redirect all logging to stderr so stdout stays clean for MCP stdio transport
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

_store: GraphStore | None = None


def _get_store() -> GraphStore:
    global _store
    if _store is None:
        # Tools run on the server's event loop, so drag debounce fires in real time
        _store = GraphStore(load_config(), scheduler=AsyncioScheduler())
    return _store


def _graph_state(store: GraphStore) -> dict:
    data = store.snapshot().model_dump(by_alias=True, mode="json")
    data["can_undo"] = store.can_undo()
    data["can_redo"] = store.can_redo()
    return data


def _playback_state(store: GraphStore) -> dict:
    player = store.player
    current = player.trace[player.cursor] if player.cursor >= 0 else None
    return {
        "status": player.status.value,
        "mode": player.mode.value if player.mode else None,
        "cursor": player.cursor,
        "total_steps": len(player.trace),
        "is_complete": player.is_complete,
        "visited_nodes": player.highlights.visited_nodes(),
        "path_nodes": player.highlights.path_nodes(),
        "narration": (
            current.trace.model_dump(by_alias=True, mode="json")
            if current is not None and current.trace is not None else None
        ),
    }


@mcp.tool()
def get_graph() -> str:
    """Return the current graph as a snapshot (nodes, edges, nextId) plus undo/redo availability."""
    return json.dumps(_graph_state(_get_store()))


@mcp.tool()
def add_node(x: float, y: float) -> str:
    """Add a node at (x, y). Returns the new node."""
    node = _get_store().add_node(x, y)
    return json.dumps(node.model_dump())


@mcp.tool()
def move_node(node_id: int, x: float, y: float) -> str:
    """Move a node. Rapid moves are merged into one undo step."""
    node = _get_store().move_node(node_id, x, y)
    return json.dumps({"moved": node is not None})


@mcp.tool()
def delete_node(node_id: int) -> str:
    """Delete a node and every edge touching it."""
    return json.dumps({"deleted": _get_store().delete_node(node_id)})


@mcp.tool()
def add_edge(from_id: int, to_id: int, kind: str = "directed", weight: int = 0) -> str:
    """Add an edge. kind is 'directed' or 'undirected'. Self loops and duplicates are rejected."""
    try:
        added = _get_store().add_edge(from_id, to_id, EdgeKind(kind), weight)
        return json.dumps({"added": added})
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def update_edge(
    from_id: int,
    to_id: int,
    kind: Optional[str] = None,
    weight: Optional[int] = None,
) -> str:
    """Change an edge's kind ('directed'/'undirected') and/or weight."""
    store = _get_store()
    try:
        changed = False
        if kind is not None:
            changed = store.update_edge_kind(from_id, to_id, EdgeKind(kind)) or changed
        if weight is not None:
            changed = store.update_edge_weight(from_id, to_id, weight) or changed
        return json.dumps({"updated": changed})
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def reverse_edge(from_id: int, to_id: int) -> str:
    """Flip the direction of a directed edge."""
    return json.dumps({"reversed": _get_store().reverse_edge(from_id, to_id)})


@mcp.tool()
def delete_edge(from_id: int, to_id: int) -> str:
    """Delete an edge (and its mirror when undirected)."""
    return json.dumps({"deleted": _get_store().delete_edge(from_id, to_id)})


@mcp.tool()
def undo() -> str:
    """Undo the last graph edit."""
    store = _get_store()
    store.undo()
    return json.dumps(_graph_state(store))


@mcp.tool()
def redo() -> str:
    """Redo the last undone graph edit."""
    store = _get_store()
    store.redo()
    return json.dumps(_graph_state(store))


@mcp.tool()
def list_algorithms() -> str:
    """List the available algorithms with their requirements."""
    return json.dumps([
        {
            "id": kind.value,
            "name": info.name,
            "tagline": info.tagline,
            "summary": describe(kind),
            "requires_end": info.requires_end,
            "undirected_only": info.undirected_only,
        }
        for kind, info in ALGORITHMS.items()
    ])


@mcp.tool()
def run_algorithm(algorithm: str, start_id: int, end_id: Optional[int] = None) -> str:
    """Run bfs, dfs, dijkstra or prim and load its trace for stepping."""
    store = _get_store()
    try:
        result = store.run_algorithm(algorithm, start_id, end_id, mode=PlaybackMode.MANUAL)
        data = result.model_dump(by_alias=True, mode="json")
        data["visited_nodes"] = result.visited_nodes
        data["path_nodes"] = result.path_nodes
        return json.dumps(data)
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def step(action: str = "forward", index: Optional[int] = None) -> str:
    """Move through the loaded trace: action is forward, backward, jump (with index) or reset."""
    store = _get_store()
    player = store.player
    if action == "forward":
        player.step_forward()
    elif action == "backward":
        player.step_backward()
    elif action == "jump":
        if index is None:
            return json.dumps({"error": "jump requires an index"})
        player.jump_to_step(index)
    elif action == "reset":
        player.reset()
    else:
        return json.dumps({"error": f"Unknown step action: {action}"})
    return json.dumps(_playback_state(store))


if __name__ == "__main__":
    mcp.run()
