"""Pull-based, cancellable graph traversals.

Each algorithm is written as a generator yielding :class:`~.steps.Step`
objects, wrapped in a :class:`Traversal` that callers advance on their own
schedule (timer, frame callback, or a synchronous test loop).  Traversals only
read the graph and mutate their own transient state, so cancelling one at any
point is always safe.

Algorithms:

* **BFS** – queue based; emits ``visiting`` per dequeued node and
  ``edge-discovered`` per newly enqueued neighbour.
* **DFS** – stack based; neighbours are pushed in reverse edge order so the
  first-listed neighbour is explored first.
* **Dijkstra** – list-backed priority structure stably re-sorted by distance
  each round (ties keep insertion order); stale entries are skipped lazily.
* **Prim** – grows the tree from ``start`` by repeatedly taking the lightest
  edge leaving it; the first minimum found wins ties.  Stops early when no
  crossing edge remains.

Every traversal finishes with a single ``completed`` step.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
import math
from numbers import Real
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Deque,
    Dict,
    Generator,
    List,
    Optional,
    Tuple,
)

from .steps import Step, StepKind, TraversalAlgorithm

if TYPE_CHECKING:  # pragma: no cover - import is for type checking only
    from ..structures.graph import Graph

logger = logging.getLogger(__name__)

StepStream = Generator[Step, None, None]
TreeEdge = Tuple[str, str, Real]

__all__ = [
    "Traversal",
    "TraversalSummary",
    "start_traversal",
]


@dataclass
class TraversalSummary:
    """Running results of a traversal, updated as steps are produced."""

    algorithm: TraversalAlgorithm
    start: str
    order: List[str] = field(default_factory=list)
    distances: Dict[str, float] = field(default_factory=dict)
    predecessors: Dict[str, Optional[str]] = field(default_factory=dict)
    tree_edges: List[TreeEdge] = field(default_factory=list)
    completed: bool = False

    @property
    def total_weight(self) -> Real:
        return sum(weight for _, _, weight in self.tree_edges)

    def path_to(self, node: str) -> Optional[List[str]]:
        """Reconstruct the route from ``start`` to *node* via predecessors.

        ``None`` is returned when *node* has not been reached.
        """

        if node != self.start and self.predecessors.get(node) is None:
            return None
        path: List[str] = []
        cursor: Optional[str] = node
        while cursor is not None:
            path.append(cursor)
            cursor = self.predecessors.get(cursor)
        path.reverse()
        return path

    def as_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm.value,
            "start": self.start,
            "order": list(self.order),
            "distances": {
                node: ("inf" if math.isinf(value) else value)
                for node, value in self.distances.items()
            },
            "tree_edges": [list(edge) for edge in self.tree_edges],
            "completed": self.completed,
        }


class Traversal:
    """Iterator over the steps of one running algorithm."""

    __slots__ = ("algorithm", "start", "_summary", "_steps", "_history", "_finished", "_cancelled")

    def __init__(
        self,
        algorithm: TraversalAlgorithm,
        start: str,
        summary: TraversalSummary,
        steps: StepStream,
    ) -> None:
        self.algorithm = algorithm
        self.start = start
        self._summary = summary
        self._steps = steps
        self._history: List[Step] = []
        self._finished = False
        self._cancelled = False

    def __iter__(self) -> "Traversal":
        return self

    def __next__(self) -> Step:
        if self._finished:
            raise StopIteration
        try:
            step = next(self._steps)
        except StopIteration:
            self._finished = True
            raise
        self._history.append(step)
        return step

    def advance(self) -> Optional[Step]:
        """Return the next step, or ``None`` once the traversal is over."""

        return next(self, None)

    def drain(self) -> List[Step]:
        """Consume and return every remaining step."""

        return list(self)

    def cancel(self) -> None:
        """Abort the traversal; further iteration yields nothing."""

        if self._finished:
            return
        self._steps.close()
        self._finished = True
        self._cancelled = True
        logger.debug(
            "%s traversal from %s cancelled after %d steps",
            self.algorithm.value,
            self.start,
            len(self._history),
        )

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def history(self) -> Tuple[Step, ...]:
        return tuple(self._history)

    @property
    def summary(self) -> TraversalSummary:
        return self._summary


class _StepFactory:
    """Numbers steps consecutively for one traversal."""

    def __init__(self, algorithm: TraversalAlgorithm) -> None:
        self._algorithm = algorithm
        self._count = 0

    def __call__(self, kind: StepKind, **fields: Any) -> Step:
        step = Step(index=self._count, kind=kind, algorithm=self._algorithm, **fields)
        self._count += 1
        return step


def _bfs(graph: "Graph", start: str, summary: TraversalSummary, emit: _StepFactory) -> StepStream:
    queue: Deque[str] = deque([start])
    visited = {start}
    summary.predecessors[start] = None

    while queue:
        current = queue.popleft()
        summary.order.append(current)
        yield emit(StepKind.VISITING, node=current, frontier=tuple(queue))

        for neighbor in graph.neighbors(current):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            queue.append(neighbor)
            weight = graph.weight(current, neighbor)
            summary.predecessors[neighbor] = current
            summary.tree_edges.append((current, neighbor, weight))
            yield emit(
                StepKind.EDGE_DISCOVERED,
                source=current,
                target=neighbor,
                weight=weight,
                frontier=tuple(queue),
            )

    summary.completed = True
    yield emit(StepKind.COMPLETED)


def _dfs(graph: "Graph", start: str, summary: TraversalSummary, emit: _StepFactory) -> StepStream:
    # Entries remember the node that pushed them so the tree edge is known on visit.
    stack: List[Tuple[str, Optional[str]]] = [(start, None)]
    visited = set()

    while stack:
        current, parent = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        summary.order.append(current)
        summary.predecessors[current] = parent
        if parent is not None:
            summary.tree_edges.append((parent, current, graph.weight(parent, current)))
        yield emit(StepKind.VISITING, node=current, frontier=tuple(node for node, _ in stack))

        for neighbor in reversed(graph.neighbors(current)):
            if neighbor in visited:
                continue
            stack.append((neighbor, current))
            yield emit(
                StepKind.EDGE_DISCOVERED,
                source=current,
                target=neighbor,
                weight=graph.weight(current, neighbor),
                frontier=tuple(node for node, _ in stack),
            )

    summary.completed = True
    yield emit(StepKind.COMPLETED)


def _dijkstra(graph: "Graph", start: str, summary: TraversalSummary, emit: _StepFactory) -> StepStream:
    distances = summary.distances
    for node in graph.nodes():
        distances[node] = math.inf
        summary.predecessors[node] = None
    distances[start] = 0

    queue: List[Tuple[str, float]] = [(start, 0)]

    def frontier() -> Tuple[str, ...]:
        return tuple(node for node, _ in sorted(queue, key=lambda entry: entry[1]))

    while queue:
        queue.sort(key=lambda entry: entry[1])
        current, distance = queue.pop(0)
        if distance > distances[current]:
            continue

        summary.order.append(current)
        yield emit(
            StepKind.PROCESSING,
            node=current,
            distance=distances[current],
            frontier=frontier(),
            distances=dict(distances),
        )

        for neighbor in graph.neighbors(current):
            weight = graph.weight(current, neighbor)
            candidate = distances[current] + weight
            if candidate < distances.get(neighbor, math.inf):
                distances[neighbor] = candidate
                summary.predecessors[neighbor] = current
                queue.append((neighbor, candidate))
                yield emit(
                    StepKind.EDGE_RELAXED,
                    source=current,
                    target=neighbor,
                    weight=weight,
                    distance=candidate,
                    frontier=frontier(),
                    distances=dict(distances),
                )

    summary.tree_edges.extend(
        (parent, node, graph.weight(parent, node))
        for node, parent in summary.predecessors.items()
        if parent is not None
    )
    summary.completed = True
    yield emit(StepKind.COMPLETED, distances=dict(distances))


def _prim(graph: "Graph", start: str, summary: TraversalSummary, emit: _StepFactory) -> StepStream:
    # Dict keys act as an insertion-ordered set; scan order decides ties.
    in_tree: Dict[str, Optional[str]] = {start: None}
    summary.order.append(start)
    summary.predecessors[start] = None

    while len(in_tree) < len(graph):
        best: Optional[Tuple[str, str]] = None
        best_weight: float = math.inf
        for node in in_tree:
            for neighbor in graph.neighbors(node):
                if neighbor in in_tree:
                    continue
                weight = graph.weight(node, neighbor)
                if weight < best_weight:
                    best = (node, neighbor)
                    best_weight = weight

        if best is None:
            logger.debug("Prim from %s stopped early: no edge leaves the tree", start)
            break

        source, target = best
        in_tree[target] = source
        summary.order.append(target)
        summary.predecessors[target] = source
        summary.tree_edges.append((source, target, best_weight))
        yield emit(
            StepKind.EDGE_ADDED,
            node=target,
            source=source,
            target=target,
            weight=best_weight,
            frontier=tuple(in_tree),
        )

    summary.completed = True
    yield emit(StepKind.COMPLETED)


_ALGORITHMS: Dict[
    TraversalAlgorithm,
    Callable[["Graph", str, TraversalSummary, _StepFactory], StepStream],
] = {
    TraversalAlgorithm.BFS: _bfs,
    TraversalAlgorithm.DFS: _dfs,
    TraversalAlgorithm.DIJKSTRA: _dijkstra,
    TraversalAlgorithm.PRIM: _prim,
}


def start_traversal(graph: "Graph", algorithm: TraversalAlgorithm, start: str) -> Traversal:
    """Create a :class:`Traversal` of *algorithm* from *start*.

    The caller is responsible for checking that *start* exists; no work is
    done until the first step is requested.
    """

    summary = TraversalSummary(algorithm=algorithm, start=start)
    steps = _ALGORITHMS[algorithm](graph, start, summary, _StepFactory(algorithm))
    logger.debug("Prepared %s traversal from %s", algorithm.value, start)
    return Traversal(algorithm, start, summary, steps)
