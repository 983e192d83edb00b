"""Step records emitted by traversal algorithms.

Every traversal is a generator of :class:`Step` objects.  A step is a frozen
snapshot of one state transition: which node is being visited, which edge was
discovered or relaxed, and what the frontier and distance table look like
afterwards.  Renderers are pure readers of steps; the generator is the only
writer of traversal state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, Mapping, Optional, Tuple

__all__ = [
    "Step",
    "StepKind",
    "TraversalAlgorithm",
]


class TraversalAlgorithm(str, Enum):
    BFS = "bfs"
    DFS = "dfs"
    DIJKSTRA = "dijkstra"
    PRIM = "prim"


class StepKind(str, Enum):
    """Kind of state transition a step describes."""

    VISITING = "visiting"
    PROCESSING = "processing"
    EDGE_DISCOVERED = "edge-discovered"
    EDGE_RELAXED = "edge-relaxed"
    EDGE_ADDED = "edge-added"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Step:
    """One observable transition of a running traversal.

    Attributes:
        index: 0-based position of the step within its traversal.
        kind: What happened.
        algorithm: Algorithm that produced the step.
        node: Node visited or processed (``visiting``/``processing``).
        source, target: Edge endpoints for edge steps.
        weight: Edge weight for edge steps.
        distance: Best known distance of ``node`` (processing) or ``target``
            (relaxation) for Dijkstra.
        frontier: Working set after the step: BFS queue, DFS stack,
            Dijkstra priority order, or Prim's in-tree nodes.
        distances: Dijkstra's distance table after the step.
    """

    index: int
    kind: StepKind
    algorithm: TraversalAlgorithm
    node: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    weight: Optional[Real] = None
    distance: Optional[float] = None
    frontier: Tuple[str, ...] = ()
    distances: Mapping[str, float] = field(default_factory=dict)

    @property
    def edge(self) -> Optional[Tuple[str, str]]:
        if self.source is None or self.target is None:
            return None
        return (self.source, self.target)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind.value,
            "algorithm": self.algorithm.value,
            "node": self.node,
            "source": self.source,
            "target": self.target,
            "weight": self.weight,
            "distance": _json_distance(self.distance),
            "frontier": list(self.frontier),
            "distances": {node: _json_distance(value) for node, value in self.distances.items()},
        }


def _json_distance(value: Optional[float]) -> Optional[float | str]:
    if value is None:
        return None
    if value == float("inf"):
        return "inf"
    return value
