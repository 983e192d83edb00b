from __future__ import annotations

import random
from typing import Iterator, List, Optional

import pytest

from structviz.structures import (
    AVLNode,
    AVLTree,
    FailureReason,
    NodeSnapshot,
    RotationCase,
    RotationEvent,
    is_balanced,
    level_order_traversal,
    render_tree,
    rotate_left,
    rotate_right,
)


def _height(node: Optional[AVLNode]) -> int:
    return node.height if node is not None else 0


def _preorder(root: Optional[AVLNode]) -> Iterator[AVLNode]:
    stack: List[AVLNode] = [root] if root is not None else []
    while stack:
        node = stack.pop()
        yield node
        stack.extend(child for child in (node.right, node.left) if child is not None)


def _assert_avl(tree: AVLTree) -> None:
    assert is_balanced(tree.root)
    for node in _preorder(tree.root):
        assert node.height == 1 + max(_height(node.left), _height(node.right))
    values = tree.in_order()
    assert values == sorted(values)
    assert len(values) == len(set(values)) == len(tree)


@pytest.mark.parametrize(
    ("values", "case", "pivot"),
    [
        ((3, 2, 1), RotationCase.LL, 3),
        ((1, 2, 3), RotationCase.RR, 1),
        ((3, 1, 2), RotationCase.LR, 3),
        ((1, 3, 2), RotationCase.RL, 1),
    ],
)
def test_insert_reports_each_rotation_case(values: tuple[int, ...], case: RotationCase, pivot: int) -> None:
    tree = AVLTree(values[:2])

    outcome = tree.insert(values[2])

    assert outcome.ok
    assert outcome.detail["rotations"] == (RotationEvent(case, pivot),)
    assert render_tree(tree.root) == "2\n1 3"
    assert tree.height == 2


def test_duplicate_insert_is_rejected_without_mutation() -> None:
    tree = AVLTree([10, 5, 15])
    before = tree.snapshot()

    outcome = tree.insert(5)

    assert outcome.reason is FailureReason.DUPLICATE_KEY
    assert tree.snapshot() == before
    assert len(tree) == 3


def test_delete_missing_value_reports_not_found() -> None:
    tree = AVLTree([1, 2, 3])

    assert tree.delete(42).reason is FailureReason.NOT_FOUND
    assert AVLTree().delete(1).reason is FailureReason.NOT_FOUND
    assert tree.in_order() == [1, 2, 3]


def test_delete_node_with_two_children_uses_in_order_successor() -> None:
    tree = AVLTree([20, 10, 30, 25, 40])

    outcome = tree.delete(20)

    assert outcome.ok
    assert outcome.detail["rotations"] == ()
    assert tree.root is not None and tree.root.value == 25
    assert tree.in_order() == [10, 25, 30, 40]
    _assert_avl(tree)


def test_delete_triggers_rebalancing() -> None:
    tree = AVLTree([10, 5, 20, 30])

    outcome = tree.delete(5)

    assert outcome.detail["rotations"] == (RotationEvent(RotationCase.RR, 10),)
    assert render_tree(tree.root) == "20\n10 30"


def test_random_insert_and_delete_sequences_stay_balanced() -> None:
    rng = random.Random(2024)
    for _ in range(20):
        tree = AVLTree()
        values = rng.sample(range(500), 80)
        for value in values:
            assert tree.insert(value).ok
            _assert_avl(tree)
        rng.shuffle(values)
        for value in values[:50]:
            assert tree.delete(value).ok
            _assert_avl(tree)
        assert tree.in_order() == sorted(values[50:])


def test_snapshot_exposes_height_and_balance() -> None:
    tree = AVLTree([3, 2, 1])

    snapshot = tree.snapshot()

    assert snapshot == NodeSnapshot(
        value=2,
        height=2,
        balance=0,
        left=NodeSnapshot(1, 1, 0),
        right=NodeSnapshot(3, 1, 0),
    )
    assert NodeSnapshot.from_dict(snapshot.to_dict()) == snapshot


def test_from_snapshot_restores_identical_shape() -> None:
    tree = AVLTree([50, 30, 70, 20, 40, 60, 80, 10])

    restored = AVLTree.from_snapshot(tree.snapshot())

    assert restored.snapshot() == tree.snapshot()
    assert len(restored) == 8
    assert restored.insert(5).ok
    _assert_avl(restored)


def test_from_snapshot_rejects_invalid_trees() -> None:
    misordered = NodeSnapshot(5, 2, 1, left=NodeSnapshot(7, 1, 0))
    with pytest.raises(ValueError):
        AVLTree.from_snapshot(misordered)

    chain = NodeSnapshot(3, 3, 2, left=NodeSnapshot(2, 2, 1, left=NodeSnapshot(1, 1, 0)))
    with pytest.raises(ValueError):
        AVLTree.from_snapshot(chain)


def test_rotation_primitives_update_heights() -> None:
    y = AVLNode(3, left=AVLNode(2, left=AVLNode(1)), height=3)
    y.left.height = 2  # type: ignore[union-attr]

    root = rotate_right(y)

    assert root.value == 2
    assert (root.left.value, root.right.value) == (1, 3)  # type: ignore[union-attr]
    assert root.height == 2 and root.right.height == 1  # type: ignore[union-attr]

    back = rotate_left(root)
    assert back.value == 3
    assert back.left.value == 2  # type: ignore[union-attr]


def test_render_and_level_order_helpers() -> None:
    assert render_tree(None) == "<empty>"
    tree = AVLTree([2, 1, 3, 4])

    assert render_tree(tree.root) == "2\n1 3\n· · · 4"
    assert level_order_traversal(tree.root) == [2, 1, 3, None, None, None, 4]


def test_clear_and_none_keys() -> None:
    tree = AVLTree([1, 2])
    tree.clear()

    assert tree.root is None
    assert len(tree) == 0
    with pytest.raises(TypeError):
        tree.insert(None)


def test_nan_keys_are_rejected_without_mutation() -> None:
    tree = AVLTree([1.0, 2.0])

    with pytest.raises(ValueError, match="NaN"):
        tree.insert(float("nan"))
    assert tree.in_order() == [1.0, 2.0]


def test_is_balanced_flags_stale_heights_and_skew() -> None:
    stale = AVLNode(2, left=AVLNode(1), right=AVLNode(3), height=5)
    assert not is_balanced(stale)

    skewed = AVLNode(3, left=AVLNode(2, left=AVLNode(1), height=2), height=3)
    assert not is_balanced(skewed)

    assert is_balanced(None)
    assert is_balanced(AVLTree(range(10)).root)
