"""Interactive data structure models with stepwise, observable operations.

The package keeps the structures themselves (:mod:`structviz.structures`)
free of presentation concerns.  Operations return structured outcomes and
graph traversals are lazy step sequences (:mod:`structviz.animation`) that a
host advances at its own pace.
"""

from __future__ import annotations

from .animation import (
    DEFAULT_INTERVAL,
    Step,
    StepKind,
    StepPlayer,
    Traversal,
    TraversalAlgorithm,
    TraversalSummary,
)
from .backends import (
    BackendCheckResult,
    BackendParityError,
    check_native_backend,
    select_implementation,
    verify_parity,
)
from .config import ConfigError, VisualizerConfig, load_config
from .structures import (
    AVLTree,
    BinaryHeap,
    CollisionStrategy,
    FailureReason,
    Graph,
    HashTable,
    HeapKind,
    Outcome,
    RotationCase,
    StructureError,
    rebuild_heap,
    rebuild_table,
)

__all__ = [
    "AVLTree",
    "BackendCheckResult",
    "BackendParityError",
    "BinaryHeap",
    "CollisionStrategy",
    "ConfigError",
    "DEFAULT_INTERVAL",
    "FailureReason",
    "Graph",
    "HashTable",
    "HeapKind",
    "Outcome",
    "RotationCase",
    "Step",
    "StepKind",
    "StepPlayer",
    "StructureError",
    "Traversal",
    "TraversalAlgorithm",
    "TraversalSummary",
    "VisualizerConfig",
    "check_native_backend",
    "load_config",
    "rebuild_heap",
    "rebuild_table",
    "select_implementation",
    "verify_parity",
]
