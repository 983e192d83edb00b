"""Directed weighted graph with stepwise traversal support.

Nodes are string identifiers kept in insertion order.  Each node owns an
ordered list of destinations (duplicates suppressed) and every edge carries a
numeric weight, defaulting to ``1``.  Removing a node cascades to every edge
that references it.

Traversals (BFS, DFS, Dijkstra, Prim) are exposed as lazy step sequences via
:meth:`Graph.traverse`; see :mod:`structviz.animation.traversal`.  Only one
traversal runs per graph at a time: launching another, or clearing the graph,
cancels the one in flight.

NetworkX is imported lazily by :func:`build_networkx_graph` and
:func:`graph_layout` (which also needs NumPy) so the core stays usable
without them.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from numbers import Real
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeAlias,
)

from ..animation.steps import TraversalAlgorithm
from ..animation.traversal import Traversal, start_traversal
from .results import FailureReason, Outcome

if TYPE_CHECKING:  # pragma: no cover - import is for type checking only
    import networkx as nx  # type: ignore[import-not-found,import-untyped]

    NxDiGraph: TypeAlias = nx.DiGraph
else:  # pragma: no cover - alias keeps runtime dependency optional
    NxDiGraph: TypeAlias = Any

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1
LAYOUT_CENTER = (400.0, 300.0)
LAYOUT_RADIUS = 150.0

__all__ = [
    "DEFAULT_WEIGHT",
    "Edge",
    "Graph",
    "GraphLayout",
    "build_networkx_graph",
    "graph_layout",
]


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    weight: Real


class Graph:
    """Adjacency-list directed graph."""

    __slots__ = ("_adjacency", "_weights", "_active")

    def __init__(self) -> None:
        self._adjacency: Dict[str, List[str]] = {}
        self._weights: Dict[Tuple[str, str], Real] = {}
        self._active: Optional[Traversal] = None

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------
    def add_node(self, node: str) -> Outcome[str]:
        _validate_node_id(node)
        if node in self._adjacency:
            return Outcome.failure(FailureReason.DUPLICATE_NODE, node=node)
        self._adjacency[node] = []
        return Outcome.success(node)

    def remove_node(self, node: str) -> Outcome[str]:
        """Remove *node* together with every edge and weight referencing it."""

        _validate_node_id(node)
        if node not in self._adjacency:
            return Outcome.failure(FailureReason.UNKNOWN_NODE, node=node)
        removed = [
            Edge(node, target, self._weights[(node, target)])
            for target in self._adjacency.pop(node)
        ]
        for source, targets in self._adjacency.items():
            if node in targets:
                targets.remove(node)
                removed.append(Edge(source, node, self._weights[(source, node)]))
        for edge in removed:
            del self._weights[(edge.source, edge.target)]
        logger.debug("Removed node %s and %d incident edges", node, len(removed))
        return Outcome.success(node, removed_edges=tuple(removed))

    def add_edge(self, source: str, target: str, weight: Real = DEFAULT_WEIGHT) -> Outcome[Edge]:
        """Add the directed edge ``source -> target``.

        Both endpoints must already exist.  Re-adding an existing edge is a
        successful no-op reported with ``created=False``; the stored weight is
        kept.
        """

        _validate_node_id(source)
        _validate_node_id(target)
        if isinstance(weight, bool) or not isinstance(weight, Real):
            raise TypeError("Edge weights must be real numbers")
        if isinstance(weight, float) and math.isnan(weight):
            raise ValueError("Edge weights must not be NaN")
        missing = [node for node in (source, target) if node not in self._adjacency]
        if missing:
            return Outcome.failure(FailureReason.UNKNOWN_NODE, missing=tuple(missing))
        if target in self._adjacency[source]:
            edge = Edge(source, target, self._weights[(source, target)])
            return Outcome.success(edge, created=False)
        self._adjacency[source].append(target)
        self._weights[(source, target)] = weight
        return Outcome.success(Edge(source, target, weight), created=True)

    def remove_edge(self, source: str, target: str) -> Outcome[Optional[Edge]]:
        """Remove ``source -> target``; unknown sources and absent edges are no-ops."""

        targets = self._adjacency.get(source)
        if targets is None or target not in targets:
            return Outcome.success(None, removed=False)
        targets.remove(target)
        weight = self._weights.pop((source, target))
        return Outcome.success(Edge(source, target, weight), removed=True)

    def clear(self) -> None:
        self.cancel_active()
        self._adjacency.clear()
        self._weights.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._adjacency)

    def __contains__(self, node: object) -> bool:
        return node in self._adjacency

    def has_node(self, node: str) -> bool:
        return node in self._adjacency

    def has_edge(self, source: str, target: str) -> bool:
        return (source, target) in self._weights

    def nodes(self) -> Tuple[str, ...]:
        return tuple(self._adjacency)

    def neighbors(self, node: str) -> Tuple[str, ...]:
        """Return *node*'s destinations in edge-list order (empty if unknown)."""

        return tuple(self._adjacency.get(node, ()))

    def weight(self, source: str, target: str) -> Real:
        return self._weights.get((source, target), DEFAULT_WEIGHT)

    def edges(self) -> Tuple[Edge, ...]:
        return tuple(
            Edge(source, target, self._weights[(source, target)])
            for source, targets in self._adjacency.items()
            for target in targets
        )

    def as_dict(self) -> Dict[str, Any]:
        """Return a serialisable snapshot of nodes and weighted edges."""

        return {
            "nodes": list(self._adjacency),
            "edges": [
                {"source": edge.source, "target": edge.target, "weight": edge.weight}
                for edge in self.edges()
            ],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Graph":
        """Rebuild a graph from :meth:`as_dict` output through the public API."""

        graph = cls()
        for node in payload.get("nodes", ()):
            graph.add_node(node)
        for edge in payload.get("edges", ()):
            graph.add_edge(edge["source"], edge["target"], edge.get("weight", DEFAULT_WEIGHT)).unwrap()
        return graph

    # ------------------------------------------------------------------
    # Traversals
    # ------------------------------------------------------------------
    @property
    def active_traversal(self) -> Optional[Traversal]:
        return self._active

    def cancel_active(self) -> None:
        if self._active is not None and not self._active.finished:
            logger.debug("Cancelling running %s traversal", self._active.algorithm.value)
            self._active.cancel()
        self._active = None

    def traverse(self, algorithm: TraversalAlgorithm | str, start: str) -> Outcome[Traversal]:
        """Start *algorithm* from *start* and return its lazy step sequence."""

        algorithm = TraversalAlgorithm(algorithm)
        _validate_node_id(start)
        if start not in self._adjacency:
            return Outcome.failure(FailureReason.UNKNOWN_NODE, node=start)
        self.cancel_active()
        self._active = start_traversal(self, algorithm, start)
        return Outcome.success(self._active)

    def bfs(self, start: str) -> Outcome[Traversal]:
        return self.traverse(TraversalAlgorithm.BFS, start)

    def dfs(self, start: str) -> Outcome[Traversal]:
        return self.traverse(TraversalAlgorithm.DFS, start)

    def dijkstra(self, start: str) -> Outcome[Traversal]:
        return self.traverse(TraversalAlgorithm.DIJKSTRA, start)

    def prim(self, start: str) -> Outcome[Traversal]:
        return self.traverse(TraversalAlgorithm.PRIM, start)


def _validate_node_id(node: object) -> None:
    if not isinstance(node, str) or not node:
        raise TypeError("Node identifiers must be non-empty strings")


@dataclass(frozen=True)
class GraphLayout:
    """Structured artefact for renderers: positions and weight labels."""

    graph: NxDiGraph
    positions: Mapping[str, Tuple[float, float]]
    edge_labels: Mapping[Tuple[str, str], Real]


def build_networkx_graph(graph: Graph) -> NxDiGraph:
    """Convert *graph* to a NetworkX ``DiGraph`` preserving node order."""

    try:
        import networkx as nx  # type: ignore[import-not-found]
    except ImportError as exc:  # pragma: no cover - exercised via tests when missing
        raise ModuleNotFoundError(
            "NetworkX is required for layout support. Install it via 'pip install networkx'."
        ) from exc

    nx_graph = nx.DiGraph()
    nx_graph.add_nodes_from(graph.nodes())
    for edge in graph.edges():
        nx_graph.add_edge(edge.source, edge.target, weight=edge.weight)
    return nx_graph


def graph_layout(
    graph: Graph,
    *,
    layout: str = "circular",
    center: Tuple[float, float] = LAYOUT_CENTER,
    radius: float = LAYOUT_RADIUS,
    layout_seed: Optional[int] = 13,
) -> GraphLayout:
    """Compute node positions for *graph*.

    ``circular`` places node ``i`` of ``n`` at angle ``2πi/n`` around
    *center*; ``spring`` is forwarded to NetworkX with a fixed seed.
    NetworkX computes both layouts with NumPy.
    """

    try:
        import networkx as nx  # type: ignore[import-not-found]
        import numpy  # noqa: F401  # type: ignore[import-not-found]
    except ImportError as exc:  # pragma: no cover - exercised via tests when missing
        raise ModuleNotFoundError(
            "NetworkX and NumPy are required for layout support. "
            "Install them via 'pip install networkx numpy'."
        ) from exc

    nx_graph = build_networkx_graph(graph)
    layout_resolvers = {
        "circular": lambda g: nx.circular_layout(g, scale=radius, center=center),
        "spring": lambda g: nx.spring_layout(g, seed=layout_seed, scale=radius, center=center),
    }
    try:
        resolver = layout_resolvers[layout]
    except KeyError as exc:
        raise ValueError(
            f"Unsupported layout '{layout}'. Choose from {sorted(layout_resolvers)}"
        ) from exc

    positions: Dict[str, Tuple[float, float]] = {}
    if len(nx_graph):
        for node, coords in resolver(nx_graph).items():
            positions[node] = (float(coords[0]), float(coords[1]))
    edge_labels = {(u, v): data["weight"] for u, v, data in nx_graph.edges(data=True)}
    return GraphLayout(graph=nx_graph, positions=positions, edge_labels=edge_labels)
