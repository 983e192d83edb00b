from __future__ import annotations

import pytest

from structviz.structures import (
    TOMBSTONE,
    CollisionStrategy,
    FailureReason,
    HashTable,
    polynomial_hash,
    rebuild_table,
)


def test_polynomial_hash_reduces_after_every_character() -> None:
    assert polynomial_hash("", 11) == 0
    assert polynomial_hash("a", 11) == 9
    assert polynomial_hash("ab", 11) == 3
    assert polynomial_hash("ba", 11) == 0


def test_chaining_keeps_colliding_keys_in_insertion_order() -> None:
    table = HashTable(11, CollisionStrategy.CHAINING)
    assert polynomial_hash("a", 11) == polynomial_hash("l", 11) == 9

    table.insert("a", "1")
    outcome = table.insert("l", "2")

    assert outcome.detail == {"index": 9, "probes": (9,), "updated": False}
    assert table.slots()[9] == (("a", "1"), ("l", "2"))
    assert table.search("l").value == "2"
    assert len(table) == 2


def test_insert_existing_key_updates_in_place() -> None:
    for strategy in CollisionStrategy:
        table = HashTable(11, strategy)
        table.insert("apple", "red")

        outcome = table.insert("apple", "green")

        assert outcome.detail["updated"] is True
        assert table.search("apple").value == "green"
        assert len(table) == 1


def test_chaining_never_fills_up() -> None:
    table = HashTable(5, "chaining")
    for number in range(40):
        assert table.insert(f"key{number}", str(number)).ok

    assert len(table) == 40
    assert table.load_factor == pytest.approx(8.0)


def test_linear_probing_rejects_key_once_every_slot_is_taken() -> None:
    table = HashTable(5, CollisionStrategy.LINEAR_PROBING)
    for key in ("a", "b", "c", "d", "e"):
        assert table.insert(key, key.upper()).ok

    outcome = table.insert("f", "F")

    assert outcome.reason is FailureReason.TABLE_FULL
    assert len(outcome.detail["probes"]) == 5
    assert "f" not in table
    assert sorted(table.entries()) == [("a", "A"), ("b", "B"), ("c", "C"), ("d", "D"), ("e", "E")]


def test_linear_probing_scans_forward_on_collision() -> None:
    table = HashTable(5, CollisionStrategy.LINEAR_PROBING)
    assert polynomial_hash("a", 5) == polynomial_hash("f", 5) == 2

    table.insert("a", "1")
    outcome = table.insert("f", "2")

    assert outcome.detail["index"] == 3
    assert outcome.detail["probes"] == (2, 3)
    assert table.slots() == (None, None, ("a", "1"), ("f", "2"), None)


def test_linear_probing_wraps_around() -> None:
    table = HashTable(5, CollisionStrategy.LINEAR_PROBING)
    # "c" (99) and "h" (104) both hash to 4.
    table.insert("c", "1")
    outcome = table.insert("h", "2")

    assert outcome.detail["probes"] == (4, 0)
    assert table.search("h").detail["index"] == 0


def test_empty_marker_delete_breaks_later_probe_chain() -> None:
    table = HashTable(5, CollisionStrategy.LINEAR_PROBING)
    table.insert("a", "1")
    table.insert("f", "2")

    assert table.delete("a").value == "1"

    assert table.slots()[2] is None
    assert table.search("f").reason is FailureReason.NOT_FOUND


def test_tombstones_keep_probe_chain_intact_and_get_reused() -> None:
    table = HashTable(5, CollisionStrategy.LINEAR_PROBING, tombstones=True)
    table.insert("a", "1")
    table.insert("f", "2")
    table.delete("a")

    assert table.slots()[2] is TOMBSTONE
    found = table.search("f")
    assert found.value == "2"
    assert found.detail["probes"] == (2, 3)

    reused = table.insert("k", "3")
    assert reused.detail["index"] == 2
    assert reused.detail["probes"] == (2, 3, 4)
    assert len(table) == 2


def test_search_and_delete_missing_keys() -> None:
    table = HashTable()

    assert table.search("ghost").reason is FailureReason.NOT_FOUND
    assert table.delete("ghost").reason is FailureReason.NOT_FOUND
    with pytest.raises(TypeError):
        table.insert("key", 3)  # type: ignore[arg-type]


def test_rebuild_preserves_entries_across_strategy_and_capacity() -> None:
    table = HashTable(11, CollisionStrategy.CHAINING)
    pairs = {("apple", "red"), ("pear", "green"), ("plum", "purple"), ("fig", "brown")}
    for key, value in pairs:
        table.insert(key, value)

    outcome = rebuild_table(table, 7, CollisionStrategy.LINEAR_PROBING)

    rebuilt = outcome.unwrap()
    assert rebuilt.capacity == 7
    assert rebuilt.strategy is CollisionStrategy.LINEAR_PROBING
    assert set(rebuilt.entries()) == pairs
    assert outcome.detail["dropped"] == ()
    for key, value in pairs:
        assert rebuilt.search(key).value == value
        assert rebuilt.search(key).detail["probes"][0] == polynomial_hash(key, 7)


def test_rebuild_reports_entries_that_no_longer_fit() -> None:
    table = HashTable(11, CollisionStrategy.CHAINING)
    for number in range(6):
        table.insert(f"k{number}", str(number))

    outcome = rebuild_table(table, 5, CollisionStrategy.LINEAR_PROBING)

    rebuilt = outcome.value
    assert len(rebuilt) == 5
    assert len(outcome.detail["dropped"]) == 1
    assert set(rebuilt.entries()) | set(outcome.detail["dropped"]) == set(table.entries())


@pytest.mark.parametrize("capacity", [4, 32])
def test_rebuild_rejects_out_of_range_capacity(capacity: int) -> None:
    table = HashTable(11)
    table.insert("apple", "red")

    outcome = rebuild_table(table, capacity)

    assert outcome.reason is FailureReason.INVALID_CAPACITY
    assert outcome.detail["bounds"] == (5, 31)
    assert table.search("apple").ok


def test_rebuild_with_same_shape_reproduces_slots() -> None:
    table = HashTable(11, CollisionStrategy.CHAINING)
    for key in ("a", "l", "w", "pear"):
        table.insert(key, key * 2)

    rebuilt = rebuild_table(table).unwrap()

    assert rebuilt.slots() == table.slots()
    assert rebuilt is not table
