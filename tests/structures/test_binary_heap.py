from __future__ import annotations

import random

import pytest

from structviz.structures import BinaryHeap, FailureReason, HeapKind, rebuild_heap


def _assert_heap_order(values: tuple, kind: HeapKind) -> None:
    before = kind.comparator
    for index in range(1, len(values)):
        parent = (index - 1) // 2
        assert not before(values[index], values[parent]), (values, index)


def test_insert_sifts_up_and_reports_swaps() -> None:
    heap = BinaryHeap(HeapKind.MIN)
    for value in (5, 3, 8):
        heap.insert(value)

    outcome = heap.insert(1)

    assert outcome.ok
    assert outcome.value == 1
    assert outcome.detail["swaps"] == ((3, 1), (1, 0))
    assert heap.to_sequence() == (1, 3, 8, 5)


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (HeapKind.MIN, [1, 2, 3, 5, 8, 9]),
        (HeapKind.MAX, [9, 8, 5, 3, 2, 1]),
    ],
)
def test_extracting_everything_yields_sorted_values(kind: HeapKind, expected: list[int]) -> None:
    heap = BinaryHeap(kind, [5, 3, 8, 1, 9, 2])

    extracted = [heap.extract_root().unwrap() for _ in range(len(heap))]

    assert extracted == expected
    assert len(heap) == 0


@pytest.mark.parametrize("kind", list(HeapKind))
def test_heap_order_holds_after_every_insert(kind: HeapKind) -> None:
    rng = random.Random(7)
    heap = BinaryHeap(kind)
    for _ in range(60):
        heap.insert(rng.randint(-50, 50))
        _assert_heap_order(heap.to_sequence(), kind)

    drained = [heap.extract_root().value for _ in range(60)]
    assert drained == sorted(drained, reverse=kind is HeapKind.MAX)


def test_extract_on_empty_heap_reports_failure_without_mutation() -> None:
    heap = BinaryHeap()

    outcome = heap.extract_root()

    assert not outcome.ok
    assert outcome.reason is FailureReason.EMPTY_STRUCTURE
    assert outcome.value is None
    assert heap.to_sequence() == ()
    assert heap.peek().reason is FailureReason.EMPTY_STRUCTURE


def test_extract_single_element_leaves_empty_heap() -> None:
    heap = BinaryHeap(HeapKind.MAX, [4])

    outcome = heap.extract_root()

    assert outcome.value == 4
    assert outcome.detail["swaps"] == ()
    assert len(heap) == 0


def test_duplicates_and_floats_are_accepted() -> None:
    heap = BinaryHeap(HeapKind.MIN, [2.5, 2.5, -1, 2.5])

    assert heap.peek().value == -1
    assert sorted(heap.to_sequence()) == [-1, 2.5, 2.5, 2.5]


def test_rebuild_heap_reinserts_in_array_order() -> None:
    heap = BinaryHeap(HeapKind.MIN, [5, 3, 8, 1])
    assert heap.to_sequence() == (1, 3, 8, 5)

    rebuilt = rebuild_heap(heap, "max")

    assert rebuilt.kind is HeapKind.MAX
    assert rebuilt.to_sequence() == (8, 5, 3, 1)
    assert heap.to_sequence() == (1, 3, 8, 5)


@pytest.mark.parametrize("invalid", ["7", None, True, object()])
def test_insert_rejects_non_numeric_values(invalid: object) -> None:
    heap = BinaryHeap()

    with pytest.raises(TypeError):
        heap.insert(invalid)  # type: ignore[arg-type]
    assert len(heap) == 0


def test_insert_rejects_nan_without_mutation() -> None:
    heap = BinaryHeap()
    heap.insert(2.5)

    with pytest.raises(ValueError, match="NaN"):
        heap.insert(float("nan"))
    assert heap.to_sequence() == (2.5,)


def test_unknown_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        BinaryHeap("median")


def test_snapshot_reinsertion_reproduces_layout() -> None:
    heap = BinaryHeap(HeapKind.MAX, [4, 9, 1, 7, 3, 8])

    restored = BinaryHeap(heap.kind, heap.to_sequence())

    assert restored.to_sequence() == heap.to_sequence()
