"""Self-balancing AVL search tree with observable rebalancing.

The tree owns its nodes exclusively: every subtree hangs off exactly one parent
slot and rotations only reassign those slots.  Insertions and deletions report
the rebalancing cases they triggered (``LL``, ``RR``, ``LR``, ``RL``) so a
renderer can narrate each rotation.

Helpers carried alongside the tree:

* ``render_tree`` – deterministic level-order ASCII rendering where missing
  children appear as centred dots.
* ``level_order_traversal`` – level-order values including ``None`` sentinels.
* ``is_balanced`` – verifies the height-balanced invariant in ``O(n)``.
* ``NodeSnapshot`` – immutable node view (value, height, balance) that can be
  serialised and restored with :meth:`AVLTree.from_snapshot`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from .results import FailureReason, Outcome

logger = logging.getLogger(__name__)

__all__ = [
    "AVLNode",
    "AVLTree",
    "NodeSnapshot",
    "RotationCase",
    "RotationEvent",
    "is_balanced",
    "level_order_traversal",
    "render_tree",
    "rotate_left",
    "rotate_right",
]


@dataclass(slots=True)
class AVLNode:
    """Tree node storing its own subtree height."""

    value: Any
    left: Optional["AVLNode"] = None
    right: Optional["AVLNode"] = None
    height: int = 1


class RotationCase(str, Enum):
    """Imbalance shape resolved at a node."""

    LL = "LL"
    RR = "RR"
    LR = "LR"
    RL = "RL"


@dataclass(frozen=True)
class RotationEvent:
    case: RotationCase
    pivot: Any


@dataclass(frozen=True)
class NodeSnapshot:
    """Read-only view of a node for renderers."""

    value: Any
    height: int
    balance: int
    left: Optional["NodeSnapshot"] = None
    right: Optional["NodeSnapshot"] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "height": self.height,
            "balance": self.balance,
            "left": self.left.to_dict() if self.left is not None else None,
            "right": self.right.to_dict() if self.right is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NodeSnapshot":
        if not isinstance(payload, dict) or "value" not in payload:
            raise TypeError("snapshot payload must be a mapping with a 'value' entry")
        left = payload.get("left")
        right = payload.get("right")
        return cls(
            value=payload["value"],
            height=int(payload.get("height", 1)),
            balance=int(payload.get("balance", 0)),
            left=cls.from_dict(left) if left is not None else None,
            right=cls.from_dict(right) if right is not None else None,
        )


def _height(node: Optional[AVLNode]) -> int:
    return node.height if node is not None else 0


def _balance(node: Optional[AVLNode]) -> int:
    if node is None:
        return 0
    return _height(node.left) - _height(node.right)


def _update_height(node: AVLNode) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))


def rotate_right(y: AVLNode) -> AVLNode:
    """Rotate *y* right and return the new subtree root."""

    x = y.left
    assert x is not None, "right rotation requires a left child"
    y.left = x.right
    x.right = y
    _update_height(y)
    _update_height(x)
    return x


def rotate_left(x: AVLNode) -> AVLNode:
    """Rotate *x* left and return the new subtree root."""

    y = x.right
    assert y is not None, "left rotation requires a right child"
    x.right = y.left
    y.left = x
    _update_height(x)
    _update_height(y)
    return y


class AVLTree:
    """AVL tree with unique keys."""

    __slots__ = ("_root", "_size")

    def __init__(self, values: Optional[Iterable[Any]] = None) -> None:
        self._root: Optional[AVLNode] = None
        self._size = 0
        if values is not None:
            for value in values:
                self.insert(value)

    @property
    def root(self) -> Optional[AVLNode]:
        return self._root

    @property
    def height(self) -> int:
        return _height(self._root)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, value: object) -> bool:
        node = self._root
        while node is not None:
            if value == node.value:
                return True
            node = node.left if value < node.value else node.right  # type: ignore[operator]
        return False

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    def insert(self, value: Any) -> Outcome[Any]:
        """Insert *value*, rebalancing along the path back to the root.

        A duplicate leaves the tree untouched and reports
        :attr:`FailureReason.DUPLICATE_KEY`.
        """

        _validate_key(value)
        if value in self:
            return Outcome.failure(FailureReason.DUPLICATE_KEY, value=value)
        events: List[RotationEvent] = []
        self._root = self._insert(self._root, value, events)
        self._size += 1
        _log_rotations("insert", value, events)
        return Outcome.success(value, rotations=tuple(events))

    def delete(self, value: Any) -> Outcome[Any]:
        """Remove *value*; a missing value reports ``not-found``."""

        _validate_key(value)
        if value not in self:
            return Outcome.failure(FailureReason.NOT_FOUND, value=value)
        events: List[RotationEvent] = []
        self._root = self._delete(self._root, value, events)
        self._size -= 1
        _log_rotations("delete", value, events)
        return Outcome.success(value, rotations=tuple(events))

    def clear(self) -> None:
        self._root = None
        self._size = 0

    def _insert(
        self, node: Optional[AVLNode], value: Any, events: List[RotationEvent]
    ) -> AVLNode:
        if node is None:
            return AVLNode(value)
        if value < node.value:
            node.left = self._insert(node.left, value, events)
        else:
            node.right = self._insert(node.right, value, events)

        _update_height(node)
        balance = _balance(node)

        if balance > 1 and value < node.left.value:  # type: ignore[union-attr]
            events.append(RotationEvent(RotationCase.LL, node.value))
            return rotate_right(node)
        if balance < -1 and value > node.right.value:  # type: ignore[union-attr]
            events.append(RotationEvent(RotationCase.RR, node.value))
            return rotate_left(node)
        if balance > 1 and value > node.left.value:  # type: ignore[union-attr]
            events.append(RotationEvent(RotationCase.LR, node.value))
            node.left = rotate_left(node.left)  # type: ignore[arg-type]
            return rotate_right(node)
        if balance < -1 and value < node.right.value:  # type: ignore[union-attr]
            events.append(RotationEvent(RotationCase.RL, node.value))
            node.right = rotate_right(node.right)  # type: ignore[arg-type]
            return rotate_left(node)
        return node

    def _delete(
        self, node: Optional[AVLNode], value: Any, events: List[RotationEvent]
    ) -> Optional[AVLNode]:
        if node is None:
            return None
        if value < node.value:
            node.left = self._delete(node.left, value, events)
        elif value > node.value:
            node.right = self._delete(node.right, value, events)
        else:
            if node.left is None:
                return node.right
            if node.right is None:
                return node.left
            successor = node.right
            while successor.left is not None:
                successor = successor.left
            node.value = successor.value
            node.right = self._delete(node.right, successor.value, events)

        _update_height(node)
        balance = _balance(node)

        if balance > 1:
            if _balance(node.left) >= 0:
                events.append(RotationEvent(RotationCase.LL, node.value))
                return rotate_right(node)
            events.append(RotationEvent(RotationCase.LR, node.value))
            node.left = rotate_left(node.left)  # type: ignore[arg-type]
            return rotate_right(node)
        if balance < -1:
            if _balance(node.right) <= 0:
                events.append(RotationEvent(RotationCase.RR, node.value))
                return rotate_left(node)
            events.append(RotationEvent(RotationCase.RL, node.value))
            node.right = rotate_right(node.right)  # type: ignore[arg-type]
            return rotate_left(node)
        return node

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def in_order(self) -> List[Any]:
        """Return values in ascending order."""

        result: List[Any] = []
        stack: List[AVLNode] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            result.append(node.value)
            node = node.right
        return result

    def snapshot(self) -> Optional[NodeSnapshot]:
        return _snapshot(self._root)

    @classmethod
    def from_snapshot(cls, snapshot: Optional[NodeSnapshot]) -> "AVLTree":
        """Restore a tree with exactly the shape described by *snapshot*.

        Raises ``ValueError`` when the snapshot breaks search ordering or the
        balance invariant.  Heights are recomputed rather than trusted.
        """

        tree = cls()
        tree._root = _restore(snapshot, None, None)
        if not is_balanced(tree._root):
            raise ValueError("snapshot violates the AVL balance invariant")
        tree._size = len(tree.in_order())
        return tree


def _snapshot(node: Optional[AVLNode]) -> Optional[NodeSnapshot]:
    if node is None:
        return None
    return NodeSnapshot(
        value=node.value,
        height=node.height,
        balance=_balance(node),
        left=_snapshot(node.left),
        right=_snapshot(node.right),
    )


def _restore(
    snapshot: Optional[NodeSnapshot], low: Any, high: Any
) -> Optional[AVLNode]:
    if snapshot is None:
        return None
    value = snapshot.value
    _validate_key(value)
    if (low is not None and not low < value) or (high is not None and not value < high):
        raise ValueError(f"snapshot value {value!r} breaks search-tree ordering")
    node = AVLNode(value)
    node.left = _restore(snapshot.left, low, value)
    node.right = _restore(snapshot.right, value, high)
    _update_height(node)
    return node


def _validate_key(value: object) -> None:
    if value is None:
        raise TypeError("AVL tree values must not be None")
    if isinstance(value, float) and math.isnan(value):
        raise ValueError("AVL tree values must not be NaN")


def _log_rotations(action: str, value: Any, events: List[RotationEvent]) -> None:
    for event in events:
        logger.debug("%s %r: %s rotation at %r", action, value, event.case.value, event.pivot)


def is_balanced(root: Optional[AVLNode]) -> bool:
    """Return ``True`` when every stored height is exact and every balance is within ±1."""

    stack: List[AVLNode] = [root] if root is not None else []
    while stack:
        node = stack.pop()
        if node.height != 1 + max(_height(node.left), _height(node.right)):
            return False
        if abs(_balance(node)) > 1:
            return False
        stack.extend(child for child in (node.left, node.right) if child is not None)
    return True


def render_tree(root: Optional[AVLNode]) -> str:
    """Render *root* one line per level, marking missing nodes with ``·``.

    The number of lines equals the root's stored height.
    """

    if root is None:
        return "<empty>"

    lines: List[str] = []
    level: List[Optional[AVLNode]] = [root]
    for _ in range(root.height):
        lines.append(" ".join("·" if node is None else str(node.value) for node in level))
        level = [
            child
            for node in level
            for child in ((node.left, node.right) if node is not None else (None, None))
        ]
    return "\n".join(lines)


def level_order_traversal(root: Optional[AVLNode]) -> List[Optional[Any]]:
    """Return values level by level, ``None`` marking each missing child of a real node."""

    result: List[Optional[Any]] = []
    frontier: List[Optional[AVLNode]] = [root] if root is not None else []
    while frontier:
        result.extend(None if node is None else node.value for node in frontier)
        frontier = [
            child
            for node in frontier
            if node is not None
            for child in (node.left, node.right)
        ]
    while result and result[-1] is None:
        result.pop()
    return result
