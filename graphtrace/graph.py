"""Mutable weighted graph: nodes, adjacency lists and mutation primitives.

Mutators never edit a list in place. They build a replacement list and assign
it back into ``adjacency``, so a snapshot or a caller holding an older list
never observes a half-applied change (e.g. a source list updated while its
mirror is not yet).

Every mutator returns a truthy value when it changed state and a falsy one when
the request could not apply cleanly (unknown id, duplicate edge, self loop).
"""

import logging

from graphtrace.models import Edge, EdgeKind, Node, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_NODE_RADIUS = 30.0


class GraphModel:
    """Nodes in insertion order plus an owned ``node id -> [Edge]`` map."""

    def __init__(self, node_radius: float = DEFAULT_NODE_RADIUS) -> None:
        self.node_radius = node_radius
        self.nodes: list[Node] = []
        self.adjacency: dict[int, list[Edge]] = {}
        self.next_id: int = 0

    # --- Lookups ---

    def has_node(self, node_id: int) -> bool:
        return node_id in self.adjacency

    def get_node(self, node_id: int) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_ids(self) -> list[int]:
        return [n.id for n in self.nodes]

    def edges_from(self, node_id: int) -> list[Edge]:
        return list(self.adjacency.get(node_id, []))

    def get_edge(self, from_id: int, to_id: int) -> Edge | None:
        for edge in self.adjacency.get(from_id, []):
            if edge.to_id == to_id:
                return edge
        return None

    def all_edges(self) -> list[Edge]:
        return [e for edges in self.adjacency.values() for e in edges]

    def has_directed_edges(self) -> bool:
        return any(e.kind == EdgeKind.DIRECTED for e in self.all_edges())

    def has_negative_weights(self) -> bool:
        return any(e.weight < 0 for e in self.all_edges())

    def is_undirected_edge(self, from_id: int, to_id: int) -> bool:
        edge = self.get_edge(from_id, to_id)
        return edge is not None and edge.is_undirected

    # --- Node mutations ---

    def add_node(self, x: float, y: float) -> Node:
        node = Node(id=self.next_id + 1, x=x, y=y, r=self.node_radius)
        self.nodes = [*self.nodes, node]
        self.adjacency[node.id] = []
        self.next_id = node.id
        logger.debug("Added node %d at (%.1f, %.1f)", node.id, x, y)
        return node

    def move_node(self, node_id: int, x: float, y: float) -> Node | None:
        current = self.get_node(node_id)
        if current is None:
            return None
        moved = current.model_copy(update={"x": x, "y": y})
        self.nodes = [moved if n.id == node_id else n for n in self.nodes]
        return moved

    def delete_node(self, node_id: int) -> bool:
        if not self.has_node(node_id):
            return False

        self.nodes = [n for n in self.nodes if n.id != node_id]
        del self.adjacency[node_id]

        # Only replace lists that actually point at the deleted node
        for nid, edges in self.adjacency.items():
            if any(e.to_id == node_id for e in edges):
                self.adjacency[nid] = [e for e in edges if e.to_id != node_id]

        logger.debug("Deleted node %d", node_id)
        return True

    # --- Edge mutations ---

    def add_edge(
        self,
        from_id: int,
        to_id: int,
        kind: EdgeKind = EdgeKind.DIRECTED,
        weight: int = 0,
    ) -> bool:
        if from_id == to_id:
            logger.debug("Rejected self loop on node %d", from_id)
            return False
        if not self.has_node(from_id) or not self.has_node(to_id):
            return False
        if self.get_edge(from_id, to_id) is not None:
            logger.debug("Rejected duplicate edge %d->%d", from_id, to_id)
            return False

        edge = Edge(from_id=from_id, to_id=to_id, weight=weight, kind=kind)
        if edge.is_undirected:
            # The mirror slot must be free too, otherwise neither edge is added
            if self.get_edge(to_id, from_id) is not None:
                logger.debug("Rejected undirected edge %d-%d: mirror slot taken", from_id, to_id)
                return False
            self.adjacency[to_id] = [*self.adjacency[to_id], edge.mirrored()]
        self.adjacency[from_id] = [*self.adjacency[from_id], edge]
        return True

    def update_edge_kind(self, from_id: int, to_id: int, kind: EdgeKind) -> bool:
        edge = self.get_edge(from_id, to_id)
        if edge is None or edge.kind == kind:
            return False

        updated = edge.model_copy(update={"kind": kind})
        self.adjacency[from_id] = self._replace(from_id, to_id, updated)

        if kind == EdgeKind.UNDIRECTED:
            mirror = updated.mirrored()
            if self.get_edge(to_id, from_id) is None:
                self.adjacency[to_id] = [*self.adjacency[to_id], mirror]
            else:
                # An opposite directed edge becomes the mirror
                self.adjacency[to_id] = self._replace(to_id, from_id, mirror)
        else:
            self.adjacency[to_id] = [e for e in self.adjacency[to_id] if e.to_id != from_id]
        return True

    def update_edge_weight(self, from_id: int, to_id: int, weight: int) -> bool:
        edge = self.get_edge(from_id, to_id)
        if edge is None:
            return False

        self.adjacency[from_id] = self._replace(
            from_id, to_id, edge.model_copy(update={"weight": weight}),
        )
        if edge.is_undirected:
            mirror = self.get_edge(to_id, from_id)
            if mirror is not None:
                self.adjacency[to_id] = self._replace(
                    to_id, from_id, mirror.model_copy(update={"weight": weight}),
                )
        return True

    def reverse_edge(self, from_id: int, to_id: int) -> bool:
        edge = self.get_edge(from_id, to_id)
        if edge is None or edge.is_undirected:
            return False
        if self.get_edge(to_id, from_id) is not None:
            return False

        self.adjacency[from_id] = [e for e in self.adjacency[from_id] if e.to_id != to_id]
        reversed_edge = Edge(
            from_id=to_id, to_id=from_id, weight=edge.weight, kind=EdgeKind.DIRECTED,
        )
        self.adjacency[to_id] = [*self.adjacency[to_id], reversed_edge]
        return True

    def delete_edge(self, from_id: int, to_id: int) -> bool:
        edge = self.get_edge(from_id, to_id)
        if edge is None:
            return False

        self.adjacency[from_id] = [e for e in self.adjacency[from_id] if e.to_id != to_id]
        if edge.is_undirected:
            self.adjacency[to_id] = [e for e in self.adjacency[to_id] if e.to_id != from_id]
        return True

    def clear(self) -> None:
        self.nodes = []
        self.adjacency = {}
        self.next_id = 0

    # --- Snapshots ---

    def snapshot(self) -> Snapshot:
        return Snapshot(
            nodes=tuple(self.nodes),
            edges=tuple((nid, tuple(edges)) for nid, edges in self.adjacency.items()),
            next_id=self.next_id,
        )

    def restore(self, snapshot: Snapshot) -> None:
        self.nodes = list(snapshot.nodes)
        self.adjacency = {nid: list(edges) for nid, edges in snapshot.edges}
        # Every node owns an entry even when the snapshot omitted it
        for node in self.nodes:
            self.adjacency.setdefault(node.id, [])
        self.next_id = snapshot.next_id

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, node_radius: float = DEFAULT_NODE_RADIUS) -> "GraphModel":
        graph = cls(node_radius=node_radius)
        graph.restore(snapshot)
        return graph

    def _replace(self, from_id: int, to_id: int, replacement: Edge) -> list[Edge]:
        return [replacement if e.to_id == to_id else e for e in self.adjacency[from_id]]

    def __repr__(self) -> str:
        return f"GraphModel({len(self.nodes)} nodes, {len(self.all_edges())} edges)"
