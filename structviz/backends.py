"""Backend selection and conformance checks for accelerated implementations.

The pure-Python structures in :mod:`structviz.structures` are the reference
implementations.  An optional compiled module (``structviz_native`` by
default) may provide drop-in replacements.  The helpers here only report
whether such a module is importable, using :func:`importlib.util.find_spec`,
and fall back to the reference classes when it is missing or incomplete.

Swapping implementations must not change observable behaviour, including
tie-breaking and ordering, so :func:`verify_parity` replays an operation
script against two instances and compares every outcome and snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module as _import_module
from importlib.util import find_spec as _find_spec
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from .animation.traversal import Traversal
from .structures.avl_tree import AVLTree
from .structures.binary_heap import BinaryHeap
from .structures.graph import Graph
from .structures.hash_table import HashTable
from .structures.results import Outcome

logger = logging.getLogger(__name__)

NATIVE_MODULE = "structviz_native"

Operation = Tuple[str, Sequence[Any]]

__all__ = [
    "BackendCheckResult",
    "BackendParityError",
    "NATIVE_MODULE",
    "ParityReport",
    "check_native_backend",
    "select_implementation",
    "verify_parity",
]


@dataclass(frozen=True)
class _Component:
    attribute: str
    reference: type
    methods: Tuple[str, ...]
    snapshot: Callable[[Any], Any]


_COMPONENTS: Mapping[str, _Component] = {
    "heap": _Component(
        "BinaryHeap",
        BinaryHeap,
        ("insert", "extract_root", "peek", "clear", "to_sequence"),
        lambda heap: heap.to_sequence(),
    ),
    "avl_tree": _Component(
        "AVLTree",
        AVLTree,
        ("insert", "delete", "clear", "in_order", "snapshot"),
        lambda tree: tree.snapshot(),
    ),
    "graph": _Component(
        "Graph",
        Graph,
        ("add_node", "remove_node", "add_edge", "remove_edge", "clear", "traverse", "as_dict"),
        lambda graph: graph.as_dict(),
    ),
    "hash_table": _Component(
        "HashTable",
        HashTable,
        ("insert", "search", "delete", "clear", "slots", "entries"),
        lambda table: table.slots(),
    ),
}


@dataclass(frozen=True, slots=True)
class BackendCheckResult:
    """Outcome of probing an optional accelerated module."""

    module: str
    available: bool
    present: tuple[str, ...]
    missing: tuple[str, ...]

    def provides(self, component: str) -> bool:
        return component in self.present


class BackendParityError(AssertionError):
    """Raised when two implementations diverge on the same operation."""


@dataclass(frozen=True)
class ParityReport:
    operations: int
    final_snapshot: Any


def _component(name: str) -> _Component:
    try:
        return _COMPONENTS[name]
    except KeyError as exc:
        raise ValueError(
            f"Unknown component {name!r}. Choose from {sorted(_COMPONENTS)}"
        ) from exc


def check_native_backend(
    module: str = NATIVE_MODULE,
    components: Optional[Iterable[str]] = None,
) -> BackendCheckResult:
    """Report which *components* the accelerated *module* implements.

    A component counts as present only when the module exposes its class and
    that class defines every method of the reference contract.
    """

    names = tuple(components) if components is not None else tuple(_COMPONENTS)
    for name in names:
        _component(name)
    if _find_spec(module) is None:
        return BackendCheckResult(module=module, available=False, present=(), missing=names)

    native = _import_module(module)
    present: list[str] = []
    missing: list[str] = []
    for name in names:
        spec = _COMPONENTS[name]
        candidate = getattr(native, spec.attribute, None)
        if candidate is not None and all(callable(getattr(candidate, method, None)) for method in spec.methods):
            present.append(name)
        else:
            missing.append(name)
    return BackendCheckResult(
        module=module,
        available=True,
        present=tuple(present),
        missing=tuple(missing),
    )


def select_implementation(
    component: str,
    *,
    prefer_native: bool = False,
    module: str = NATIVE_MODULE,
) -> type:
    """Return the class to instantiate for *component*.

    The reference class is returned unless *prefer_native* is set and the
    accelerated module provides a complete implementation.
    """

    spec = _component(component)
    if not prefer_native:
        return spec.reference
    result = check_native_backend(module, (component,))
    if not result.provides(component):
        logger.info(
            "Native %s backend unavailable in %s; using the reference implementation",
            component,
            module,
        )
        return spec.reference
    return getattr(_import_module(module), spec.attribute)


def _comparable(result: Any) -> Any:
    if isinstance(result, Outcome) and isinstance(result.value, Traversal):
        return (result.reason, tuple(result.value.drain()), dict(result.detail))
    return result


def verify_parity(
    component: str,
    reference: Any,
    candidate: Any,
    operations: Iterable[Operation],
) -> ParityReport:
    """Replay *operations* on both instances and require identical behaviour.

    Each operation is ``(method_name, args)``.  Outcomes are compared after
    every call, traversals by their complete step sequences, followed by the
    component's structural snapshot.
    """

    snapshot = _component(component).snapshot
    count = 0
    for count, (method, args) in enumerate(operations, start=1):
        expected = _comparable(getattr(reference, method)(*args))
        actual = _comparable(getattr(candidate, method)(*args))
        if expected != actual:
            raise BackendParityError(
                f"Operation #{count} {method}{tuple(args)!r} diverged: "
                f"reference={expected!r} candidate={actual!r}"
            )
        if snapshot(reference) != snapshot(candidate):
            raise BackendParityError(
                f"Snapshots diverged after operation #{count} {method}{tuple(args)!r}"
            )
    logger.debug("Verified %s parity across %d operations", component, count)
    return ParityReport(operations=count, final_snapshot=snapshot(reference))
