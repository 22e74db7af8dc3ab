"""Pydantic models for the graph engine."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ROOT_ID = -1


class EdgeKind(str, Enum):
    DIRECTED = "directed"
    UNDIRECTED = "undirected"


class TracePhase(str, Enum):
    VISIT = "visit"
    RESULT = "result"


class AlgorithmKind(str, Enum):
    BFS = "bfs"
    DFS = "dfs"
    DIJKSTRA = "dijkstra"
    PRIM = "prim"


# --- Graph data ---


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    x: float
    y: float
    r: float = 30.0


class Edge(BaseModel):
    """Outgoing edge, stored in the adjacency list of ``from_id``."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_id: int = Field(alias="from")
    to_id: int = Field(alias="to")
    weight: int = 0
    kind: EdgeKind = Field(default=EdgeKind.DIRECTED, alias="type")

    @property
    def is_undirected(self) -> bool:
        return self.kind == EdgeKind.UNDIRECTED

    def mirrored(self) -> "Edge":
        return Edge(from_id=self.to_id, to_id=self.from_id, weight=self.weight, kind=self.kind)


class Snapshot(BaseModel):
    """Immutable copy of the graph used for undo/redo and as the file format."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    nodes: tuple[Node, ...] = ()
    edges: tuple[tuple[int, tuple[Edge, ...]], ...] = ()
    next_id: int = Field(default=0, alias="nextId")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, raw: str) -> "Snapshot":
        return cls.model_validate_json(raw)


# --- Algorithm traces ---


class EdgeRef(BaseModel):
    """Edge reference in a trace. ``from_id == ROOT_ID`` marks a traversal root."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_id: int = Field(alias="from")
    to_id: int = Field(alias="to")

    @property
    def is_root(self) -> bool:
        return self.from_id == ROOT_ID


class DataStructureKind(str, Enum):
    QUEUE = "queue"
    STACK = "stack"
    PRIORITY_QUEUE = "priority-queue"


class DataStructureItem(BaseModel):
    """One entry of a queue/stack, or a node with its tentative key."""
    model_config = ConfigDict(frozen=True)

    id: int
    value: float | None = None


class DataStructureState(BaseModel):
    """Contents of the algorithm's working structure right after a step."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: DataStructureKind = Field(alias="type")
    items: tuple[DataStructureItem, ...] = ()
    processing: DataStructureItem | None = None
    just_added: tuple[int, ...] = Field(default=(), alias="justAdded")

    def item_ids(self) -> list[int]:
        return [item.id for item in self.items]


class StepTrace(BaseModel):
    """Narration attached to a visit step."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    data_structure: DataStructureState | None = Field(default=None, alias="dataStructure")


class TraceEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: TracePhase
    edge: EdgeRef
    trace: StepTrace | None = None

    @classmethod
    def visit(cls, from_id: int, to_id: int, trace: StepTrace | None = None) -> "TraceEvent":
        return cls(phase=TracePhase.VISIT, edge=EdgeRef(from_id=from_id, to_id=to_id), trace=trace)

    @classmethod
    def result(cls, from_id: int, to_id: int) -> "TraceEvent":
        return cls(phase=TracePhase.RESULT, edge=EdgeRef(from_id=from_id, to_id=to_id))


class AlgorithmParams(BaseModel):
    start_id: int
    end_id: int | None = None


class AlgorithmResult(BaseModel):
    """Outcome of one algorithm run.

    An empty ``visited_edges`` (prim) or empty ``result_edges`` (dijkstra)
    means the run was infeasible; ``error`` then carries the user-facing message.
    """
    algorithm: AlgorithmKind
    visited_edges: list[EdgeRef] = Field(default_factory=list)
    result_edges: list[EdgeRef] = Field(default_factory=list)
    events: list[TraceEvent] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def visited_nodes(self) -> list[int]:
        return [e.to_id for e in self.visited_edges]

    @property
    def path_nodes(self) -> list[int]:
        return [e.to_id for e in self.result_edges]

    @property
    def trace(self) -> list[TraceEvent]:
        if self.events:
            return list(self.events)
        events = [TraceEvent(phase=TracePhase.VISIT, edge=e) for e in self.visited_edges]
        events.extend(TraceEvent(phase=TracePhase.RESULT, edge=e) for e in self.result_edges)
        return events

    @classmethod
    def from_events(cls, algorithm: AlgorithmKind, events: list[TraceEvent]) -> "AlgorithmResult":
        return cls(
            algorithm=algorithm,
            visited_edges=[ev.edge for ev in events if ev.phase == TracePhase.VISIT],
            result_edges=[ev.edge for ev in events if ev.phase == TracePhase.RESULT],
            events=list(events),
        )


# --- Highlight flags ---


class NodeFlags(BaseModel):
    visited: bool = False
    in_shortest_path: bool = False


class EdgeFlags(BaseModel):
    used_in_traversal: bool = False
    used_in_shortest_path: bool = False
