"""Structured operation outcomes shared by every data structure.

Mutating and querying operations never raise for expected conditions such as
an empty heap or a missing graph node.  They return an :class:`Outcome`
describing either the successful result or a named :class:`FailureReason`.
The presentation layer decides how to surface failures; callers that prefer
exceptions can call :meth:`Outcome.unwrap`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")

__all__ = [
    "FailureReason",
    "Outcome",
    "StructureError",
]


class FailureReason(str, Enum):
    """Named, recoverable failure conditions."""

    EMPTY_STRUCTURE = "empty-structure"
    UNKNOWN_NODE = "unknown-node"
    DUPLICATE_NODE = "duplicate-node"
    DUPLICATE_KEY = "duplicate-key"
    TABLE_FULL = "table-full"
    INVALID_CAPACITY = "invalid-capacity"
    NOT_FOUND = "not-found"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a single public operation.

    ``reason`` is ``None`` on success.  ``detail`` carries structured metadata
    (slot indices, swap paths, rotations) that renderers can animate without
    re-deriving it from snapshots.
    """

    reason: Optional[FailureReason] = None
    value: Optional[T] = None
    detail: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, value: Optional[T] = None, **detail: Any) -> "Outcome[T]":
        return cls(reason=None, value=value, detail=dict(detail))

    @classmethod
    def failure(cls, reason: FailureReason, **detail: Any) -> "Outcome[T]":
        return cls(reason=reason, value=None, detail=dict(detail))

    @property
    def ok(self) -> bool:
        """Return ``True`` when the operation succeeded."""

        return self.reason is None

    def unwrap(self) -> T:
        """Return ``value`` or raise :class:`StructureError` on failure."""

        if self.reason is not None:
            raise StructureError(self)
        return self.value  # type: ignore[return-value]

    def as_dict(self) -> Dict[str, Any]:
        """Return a serialisable view used by the CLI's JSON output."""

        return {
            "ok": self.ok,
            "reason": self.reason.value if self.reason is not None else None,
            "value": self.value,
            "detail": dict(self.detail),
        }


class StructureError(ValueError):
    """Raised by :meth:`Outcome.unwrap` when an operation failed."""

    def __init__(self, outcome: Outcome[Any]) -> None:
        assert outcome.reason is not None
        super().__init__(f"{outcome.reason.value}: {dict(outcome.detail)}")
        self.outcome = outcome
        self.reason = outcome.reason
