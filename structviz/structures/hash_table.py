"""Fixed-capacity string hash table with two collision strategies.

Slots are addressed by a polynomial rolling hash (base 31) reduced modulo the
capacity after every character.  The exact reduction order is part of the
observable behaviour because renderers show which slot each key lands in.

* ``chaining`` – every slot holds an ordered bucket of ``(key, value)`` pairs.
* ``linear-probing`` – every slot holds at most one pair; collisions scan
  forward, wrapping around, for at most ``capacity`` attempts.

Deleting under linear probing empties the slot by default, which can hide keys
that were inserted further along the same probe chain.  Passing
``tombstones=True`` marks deleted slots instead so probe chains stay intact.
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import Iterator, List, Optional, Tuple, Union

from .results import FailureReason, Outcome

logger = logging.getLogger(__name__)

HASH_BASE = 31
DEFAULT_CAPACITY = 11
MIN_CAPACITY = 5
MAX_CAPACITY = 31

Entry = Tuple[str, str]

__all__ = [
    "CollisionStrategy",
    "DEFAULT_CAPACITY",
    "HashTable",
    "MAX_CAPACITY",
    "MIN_CAPACITY",
    "TOMBSTONE",
    "polynomial_hash",
    "rebuild_table",
]


class CollisionStrategy(str, Enum):
    CHAINING = "chaining"
    LINEAR_PROBING = "linear-probing"


class _Tombstone:
    __slots__ = ()

    def __repr__(self) -> str:
        return "TOMBSTONE"


TOMBSTONE = _Tombstone()

ProbeSlot = Union[None, Entry, _Tombstone]


def polynomial_hash(key: str, capacity: int) -> int:
    """Return the home slot of *key*: ``h = (h * 31 + ord(ch)) % capacity``."""

    value = 0
    for char in key:
        value = (value * HASH_BASE + ord(char)) % capacity
    return value


class HashTable:
    """String-to-string table with chaining or linear probing."""

    __slots__ = ("_capacity", "_strategy", "_tombstones", "_slots", "_size")

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        strategy: CollisionStrategy | str = CollisionStrategy.CHAINING,
        *,
        tombstones: bool = False,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError("capacity must be an integer")
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._strategy = CollisionStrategy(strategy)
        self._tombstones = tombstones
        self._slots: List = []
        self._size = 0
        self.clear()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def strategy(self) -> CollisionStrategy:
        return self._strategy

    @property
    def tombstones(self) -> bool:
        return self._tombstones

    @property
    def load_factor(self) -> float:
        return self._size / self._capacity

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.search(key).ok

    def home_index(self, key: str) -> int:
        return polynomial_hash(key, self._capacity)

    def clear(self) -> None:
        if self._strategy is CollisionStrategy.CHAINING:
            self._slots = [[] for _ in range(self._capacity)]
        else:
            self._slots = [None] * self._capacity
        self._size = 0

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    def insert(self, key: str, value: str) -> Outcome[str]:
        """Store *value* under *key*, overwriting an existing entry in place.

        Linear probing reports :attr:`FailureReason.TABLE_FULL` when every
        probed slot holds a different key.
        """

        _validate_text(key, "key")
        _validate_text(value, "value")
        home = self.home_index(key)

        if self._strategy is CollisionStrategy.CHAINING:
            bucket: List[Entry] = self._slots[home]
            for position, (existing, _) in enumerate(bucket):
                if existing == key:
                    bucket[position] = (key, value)
                    return Outcome.success(value, index=home, probes=(home,), updated=True)
            bucket.append((key, value))
            self._size += 1
            return Outcome.success(value, index=home, probes=(home,), updated=False)

        probes: List[int] = []
        reusable: Optional[int] = None
        for index in self._probe_sequence(home):
            probes.append(index)
            slot = self._slots[index]
            if slot is None:
                break
            if slot is TOMBSTONE:
                if reusable is None:
                    reusable = index
                continue
            if slot[0] == key:
                self._slots[index] = (key, value)
                return Outcome.success(value, index=index, probes=tuple(probes), updated=True)
        else:
            if reusable is None:
                logger.debug("Table full while inserting %r (capacity %d)", key, self._capacity)
                return Outcome.failure(FailureReason.TABLE_FULL, key=key, probes=tuple(probes))

        target = reusable if reusable is not None else probes[-1]
        self._slots[target] = (key, value)
        self._size += 1
        return Outcome.success(value, index=target, probes=tuple(probes), updated=False)

    def search(self, key: str) -> Outcome[str]:
        """Return the value stored under *key*; a miss reports ``not-found``."""

        _validate_text(key, "key")
        index, probes = self._locate(key)
        if index is None:
            return Outcome.failure(FailureReason.NOT_FOUND, key=key, probes=probes)
        if self._strategy is CollisionStrategy.CHAINING:
            value = next(stored for existing, stored in self._slots[index] if existing == key)
        else:
            value = self._slots[index][1]
        return Outcome.success(value, index=index, probes=probes)

    def delete(self, key: str) -> Outcome[str]:
        """Remove *key* and return its former value."""

        _validate_text(key, "key")
        index, probes = self._locate(key)
        if index is None:
            return Outcome.failure(FailureReason.NOT_FOUND, key=key, probes=probes)
        if self._strategy is CollisionStrategy.CHAINING:
            bucket: List[Entry] = self._slots[index]
            position = next(i for i, (existing, _) in enumerate(bucket) if existing == key)
            _, value = bucket.pop(position)
        else:
            _, value = self._slots[index]
            self._slots[index] = TOMBSTONE if self._tombstones else None
        self._size -= 1
        return Outcome.success(value, index=index, probes=probes)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def slots(self) -> Tuple:
        """Return per-slot contents.

        Chaining slots are tuples of pairs; probing slots are a pair, ``None``
        or :data:`TOMBSTONE`.
        """

        if self._strategy is CollisionStrategy.CHAINING:
            return tuple(tuple(bucket) for bucket in self._slots)
        return tuple(self._slots)

    def entries(self) -> List[Entry]:
        """Return stored pairs in slot order, then bucket order."""

        return list(self._iter_entries())

    def _iter_entries(self) -> Iterator[Entry]:
        for slot in self._slots:
            if self._strategy is CollisionStrategy.CHAINING:
                yield from slot
            elif slot is not None and slot is not TOMBSTONE:
                yield slot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _probe_sequence(self, home: int) -> Iterator[int]:
        for attempt in range(self._capacity):
            yield (home + attempt) % self._capacity

    def _locate(self, key: str) -> Tuple[Optional[int], Tuple[int, ...]]:
        home = self.home_index(key)
        if self._strategy is CollisionStrategy.CHAINING:
            found = any(existing == key for existing, _ in self._slots[home])
            return (home if found else None), (home,)

        probes: List[int] = []
        for index in self._probe_sequence(home):
            probes.append(index)
            slot = self._slots[index]
            if slot is None:
                break
            if slot is not TOMBSTONE and slot[0] == key:
                return index, tuple(probes)
        return None, tuple(probes)


def rebuild_table(
    table: HashTable,
    capacity: Optional[int] = None,
    strategy: CollisionStrategy | str | None = None,
    *,
    tombstones: Optional[bool] = None,
    bounds: Tuple[int, int] = (MIN_CAPACITY, MAX_CAPACITY),
) -> Outcome[HashTable]:
    """Return a new table with the requested shape holding *table*'s entries.

    A capacity outside *bounds* reports ``invalid-capacity`` without touching
    anything.  Entries are drained in slot order (then bucket order) and
    re-inserted through :meth:`HashTable.insert`, so every key lands exactly
    where a fresh insert would put it.  Pairs that no longer fit under linear
    probing are listed in ``detail["dropped"]``.
    """

    new_capacity = table.capacity if capacity is None else capacity
    low, high = bounds
    if isinstance(new_capacity, bool) or not isinstance(new_capacity, int):
        raise TypeError("capacity must be an integer")
    if not low <= new_capacity <= high:
        return Outcome.failure(
            FailureReason.INVALID_CAPACITY, capacity=new_capacity, bounds=(low, high)
        )

    rebuilt = HashTable(
        new_capacity,
        table.strategy if strategy is None else strategy,
        tombstones=table.tombstones if tombstones is None else tombstones,
    )
    dropped: List[Entry] = []
    for key, value in table.entries():
        if not rebuilt.insert(key, value).ok:
            dropped.append((key, value))
    logger.debug(
        "Rebuilt table as %s/%d with %d entries (%d dropped)",
        rebuilt.strategy.value,
        rebuilt.capacity,
        len(rebuilt),
        len(dropped),
    )
    return Outcome.success(rebuilt, dropped=tuple(dropped))


def _validate_text(value: object, label: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{label} must be a string")
