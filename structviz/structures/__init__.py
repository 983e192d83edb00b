"""Data structures with structured outcomes."""

from .avl_tree import (
    AVLNode,
    AVLTree,
    NodeSnapshot,
    RotationCase,
    RotationEvent,
    is_balanced,
    level_order_traversal,
    render_tree,
    rotate_left,
    rotate_right,
)
from .binary_heap import BinaryHeap, HeapKind, rebuild_heap
from .graph import DEFAULT_WEIGHT, Edge, Graph, GraphLayout, build_networkx_graph, graph_layout
from .hash_table import (
    DEFAULT_CAPACITY,
    MAX_CAPACITY,
    MIN_CAPACITY,
    TOMBSTONE,
    CollisionStrategy,
    HashTable,
    polynomial_hash,
    rebuild_table,
)
from .results import FailureReason, Outcome, StructureError

__all__ = [
    "AVLNode",
    "AVLTree",
    "BinaryHeap",
    "CollisionStrategy",
    "DEFAULT_CAPACITY",
    "DEFAULT_WEIGHT",
    "Edge",
    "FailureReason",
    "Graph",
    "GraphLayout",
    "HashTable",
    "HeapKind",
    "MAX_CAPACITY",
    "MIN_CAPACITY",
    "NodeSnapshot",
    "Outcome",
    "RotationCase",
    "RotationEvent",
    "StructureError",
    "TOMBSTONE",
    "build_networkx_graph",
    "graph_layout",
    "is_balanced",
    "level_order_traversal",
    "polynomial_hash",
    "rebuild_heap",
    "rebuild_table",
    "render_tree",
    "rotate_left",
    "rotate_right",
]
