"""Step protocol, traversal algorithms and pacing."""

from .player import DEFAULT_INTERVAL, StepPlayer
from .steps import Step, StepKind, TraversalAlgorithm
from .traversal import Traversal, TraversalSummary, start_traversal

__all__ = [
    "DEFAULT_INTERVAL",
    "Step",
    "StepKind",
    "StepPlayer",
    "Traversal",
    "TraversalAlgorithm",
    "TraversalSummary",
    "start_traversal",
]
