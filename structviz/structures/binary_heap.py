"""Array-backed binary heap with selectable min/max ordering.

The heap keeps its values in a flat list whose layout encodes the tree shape:
the parent of index ``i`` lives at ``(i - 1) // 2`` and its children at
``2i + 1`` and ``2i + 2``.  Renderers rely on :meth:`BinaryHeap.to_sequence`
returning that exact layout rather than sorted order.

Every mutation records the swaps performed while sifting so a visualiser can
replay the repair one exchange at a time.
"""

from __future__ import annotations

from enum import Enum
import logging
import math
import operator
from numbers import Real
from typing import Callable, Iterable, List, Optional, Tuple

from .results import FailureReason, Outcome

logger = logging.getLogger(__name__)

Swap = Tuple[int, int]

__all__ = [
    "BinaryHeap",
    "HeapKind",
    "rebuild_heap",
]


class HeapKind(str, Enum):
    """Ordering strategy of a :class:`BinaryHeap`."""

    MIN = "min"
    MAX = "max"

    @property
    def comparator(self) -> Callable[[Real, Real], bool]:
        """Return ``True`` when the first argument belongs above the second."""

        return operator.lt if self is HeapKind.MIN else operator.gt


class BinaryHeap:
    """Binary min- or max-heap over real numbers."""

    __slots__ = ("_kind", "_before", "_items")

    def __init__(
        self,
        kind: HeapKind | str = HeapKind.MIN,
        values: Optional[Iterable[Real]] = None,
    ) -> None:
        self._kind = HeapKind(kind)
        self._before = self._kind.comparator
        self._items: List[Real] = []
        if values is not None:
            for value in values:
                self.insert(value)

    @property
    def kind(self) -> HeapKind:
        return self._kind

    def __len__(self) -> int:
        return len(self._items)

    def to_sequence(self) -> Tuple[Real, ...]:
        """Return the current array layout as an immutable snapshot."""

        return tuple(self._items)

    def insert(self, value: Real) -> Outcome[Real]:
        """Append *value* and sift it up to restore heap order."""

        _validate_value(value)
        self._items.append(value)
        swaps = self._sift_up(len(self._items) - 1)
        logger.debug("Inserted %s into %s heap with %d swaps", value, self._kind.value, len(swaps))
        return Outcome.success(value, swaps=tuple(swaps))

    def peek(self) -> Outcome[Real]:
        if not self._items:
            return Outcome.failure(FailureReason.EMPTY_STRUCTURE)
        return Outcome.success(self._items[0])

    def extract_root(self) -> Outcome[Real]:
        """Remove and return the root value.

        An empty heap yields :attr:`FailureReason.EMPTY_STRUCTURE` and is left
        untouched.
        """

        if not self._items:
            return Outcome.failure(FailureReason.EMPTY_STRUCTURE)
        root = self._items[0]
        last = self._items.pop()
        swaps: List[Swap] = []
        if self._items:
            self._items[0] = last
            swaps = self._sift_down(0)
        logger.debug("Extracted %s from %s heap", root, self._kind.value)
        return Outcome.success(root, swaps=tuple(swaps))

    def clear(self) -> None:
        self._items.clear()

    # ------------------------------------------------------------------
    # Sift helpers
    # ------------------------------------------------------------------
    def _sift_up(self, index: int) -> List[Swap]:
        items = self._items
        swaps: List[Swap] = []
        while index > 0:
            parent = (index - 1) // 2
            if not self._before(items[index], items[parent]):
                break
            items[index], items[parent] = items[parent], items[index]
            swaps.append((index, parent))
            index = parent
        return swaps

    def _sift_down(self, index: int) -> List[Swap]:
        items = self._items
        size = len(items)
        swaps: List[Swap] = []
        while True:
            best = index
            left = 2 * index + 1
            right = left + 1
            if left < size and self._before(items[left], items[best]):
                best = left
            if right < size and self._before(items[right], items[best]):
                best = right
            if best == index:
                return swaps
            items[index], items[best] = items[best], items[index]
            swaps.append((index, best))
            index = best


def rebuild_heap(heap: BinaryHeap, kind: HeapKind | str) -> BinaryHeap:
    """Return a fresh heap of *kind* holding *heap*'s values.

    Values are re-inserted one by one in their current array order, so the
    resulting layout matches building the new heap from scratch.
    """

    rebuilt = BinaryHeap(kind)
    for value in heap.to_sequence():
        rebuilt.insert(value)
    logger.debug("Rebuilt %d values as %s heap", len(rebuilt), rebuilt.kind.value)
    return rebuilt


def _validate_value(value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError("Heap values must be real numbers")
    if isinstance(value, float) and math.isnan(value):
        raise ValueError("Heap values must not be NaN")
