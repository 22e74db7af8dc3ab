"""GraphStore: the facade a UI calls into.

Composes a GraphModel, a HistoryStore of graph snapshots, a debounced batch
for node dragging and a StepPlayer. The pieces reference each other through
the callables passed in here; nothing is shared through module globals.

Structural edits and playback are mutually exclusive: every mutation resets
the player before touching the graph, so a running trace never refers to
nodes or edges that no longer exist.
"""

import logging

from graphtrace.algorithms.registry import ALGORITHMS, run_algorithm
from graphtrace.config import Config
from graphtrace.graph import GraphModel
from graphtrace.history import BatchedHistory, HistoryStore, with_auto_history
from graphtrace.models import (
    AlgorithmKind,
    AlgorithmParams,
    AlgorithmResult,
    EdgeKind,
    Node,
    Snapshot,
)
from graphtrace.player import Markers, PlaybackMode, StepPlayer
from graphtrace.timers import Scheduler, VirtualClock

logger = logging.getLogger(__name__)


class GraphStore:
    def __init__(
        self,
        config: Config | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or Config()
        self.scheduler = scheduler or VirtualClock()
        self.graph = GraphModel(node_radius=self.config.graph.node_radius)
        self.history: HistoryStore[Snapshot] = HistoryStore(name="GraphHistoryStore")
        self.player = StepPlayer(
            self.scheduler,
            speed_ms=self.config.playback.speed_ms,
            is_undirected=self.graph_is_undirected_edge,
        )
        self._drag = BatchedHistory(
            self.history,
            self.snapshot,
            self.scheduler,
            debounce_ms=self.config.history.debounce_ms,
        )

        self._add_node = self._recorded(self.graph.add_node)
        self._delete_node = self._recorded(self.graph.delete_node)
        self._add_edge = self._recorded(self.graph.add_edge)
        self._update_edge_kind = self._recorded(self.graph.update_edge_kind)
        self._update_edge_weight = self._recorded(self.graph.update_edge_weight)
        self._reverse_edge = self._recorded(self.graph.reverse_edge)
        self._delete_edge = self._recorded(self.graph.delete_edge)
        self._set_graph = self._recorded(self.graph.restore)
        self._move_node = self._drag.wrap(self.graph.move_node)

    def _recorded(self, mutation):
        return with_auto_history(self.history, self.snapshot, mutation)

    def _begin_edit(self) -> None:
        # A pending drag is older than this edit, so it is recorded first
        self._drag.flush()
        self.player.reset()

    def graph_is_undirected_edge(self, from_id: int, to_id: int) -> bool:
        return self.graph.is_undirected_edge(from_id, to_id)

    # --- State ---

    @property
    def nodes(self) -> list[Node]:
        return self.graph.nodes

    def snapshot(self) -> Snapshot:
        return self.graph.snapshot()

    def can_undo(self) -> bool:
        return self.history.can_undo() or self._drag.has_pending

    def can_redo(self) -> bool:
        return self.history.can_redo() and not self._drag.has_pending

    # --- Mutations ---

    def add_node(self, x: float, y: float) -> Node:
        self._begin_edit()
        return self._add_node(x, y)

    def move_node(self, node_id: int, x: float, y: float) -> Node | None:
        self.player.reset()
        return self._move_node(node_id, x, y)

    def delete_node(self, node_id: int) -> bool:
        self._begin_edit()
        return self._delete_node(node_id)

    def add_edge(
        self,
        from_id: int,
        to_id: int,
        kind: EdgeKind = EdgeKind.DIRECTED,
        weight: int | None = None,
    ) -> bool:
        self._begin_edit()
        if weight is None:
            weight = self.config.graph.default_edge_weight
        return self._add_edge(from_id, to_id, EdgeKind(kind), weight)

    def update_edge_kind(self, from_id: int, to_id: int, kind: EdgeKind) -> bool:
        self._begin_edit()
        return self._update_edge_kind(from_id, to_id, EdgeKind(kind))

    def update_edge_weight(self, from_id: int, to_id: int, weight: int) -> bool:
        self._begin_edit()
        return self._update_edge_weight(from_id, to_id, weight)

    def reverse_edge(self, from_id: int, to_id: int) -> bool:
        self._begin_edit()
        return self._reverse_edge(from_id, to_id)

    def delete_edge(self, from_id: int, to_id: int) -> bool:
        self._begin_edit()
        return self._delete_edge(from_id, to_id)

    def set_graph(self, snapshot: Snapshot) -> None:
        """Replace the whole graph (e.g. loading a file) as one undoable edit."""
        self._begin_edit()
        self._set_graph(snapshot)

    # --- History ---

    def undo(self) -> bool:
        self._begin_edit()
        return self.history.undo(self.snapshot(), self.graph.restore)

    def redo(self) -> bool:
        self._begin_edit()
        return self.history.redo(self.snapshot(), self.graph.restore)

    def reset_graph(self) -> None:
        self._drag.dispose()
        self.player.reset()
        self.graph.clear()
        self.history.clear()
        logger.info("Graph reset")

    # --- Algorithms ---

    def run_algorithm(
        self,
        kind: AlgorithmKind | str,
        start_id: int,
        end_id: int | None = None,
        mode: PlaybackMode = PlaybackMode.AUTO,
    ) -> AlgorithmResult:
        """Run an algorithm and start playing its trace when it succeeded."""
        self._begin_edit()
        kind = AlgorithmKind(kind)
        result = run_algorithm(kind, self.graph, AlgorithmParams(start_id=start_id, end_id=end_id))
        if not result.succeeded:
            logger.info("%s failed: %s", ALGORITHMS[kind].name, result.error)
            return result

        self.player.start(
            result.trace,
            mode=mode,
            markers=Markers(start_id=start_id, end_id=end_id),
        )
        return result

    def close(self) -> None:
        """Cancel timers. A drag burst still waiting on its debounce is lost."""
        self._drag.dispose()
        self.player.reset()
