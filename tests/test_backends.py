from __future__ import annotations

import types

import pytest

from structviz import backends
from structviz.backends import (
    BackendCheckResult,
    BackendParityError,
    check_native_backend,
    select_implementation,
    verify_parity,
)
from structviz.structures import BinaryHeap, Graph, HashTable


class NativeHeap(BinaryHeap):
    """Stand-in for an accelerated heap with identical behaviour."""


class LossyHeap(BinaryHeap):
    def extract_root(self):  # noqa: ANN201 - mirrors the reference signature
        return self.peek()


def _install_fake_module(monkeypatch: pytest.MonkeyPatch, **attributes: object) -> None:
    module = types.ModuleType("fake_native")
    for name, value in attributes.items():
        setattr(module, name, value)

    monkeypatch.setattr(backends, "_find_spec", lambda name: object())
    monkeypatch.setattr(backends, "_import_module", lambda name: module)


def test_missing_native_module_reports_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(backends, "_find_spec", lambda name: None)

    result = check_native_backend("fake_native")

    assert isinstance(result, BackendCheckResult)
    assert not result.available
    assert result.present == ()
    assert result.missing == ("heap", "avl_tree", "graph", "hash_table")
    assert select_implementation("heap", prefer_native=True, module="fake_native") is BinaryHeap


def test_partial_native_module_only_provides_complete_components(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install_fake_module(monkeypatch, BinaryHeap=NativeHeap, Graph=object)

    result = check_native_backend("fake_native", ["heap", "graph"])

    assert result.available
    assert result.provides("heap")
    assert not result.provides("graph")
    assert result.missing == ("graph",)
    assert select_implementation("heap", prefer_native=True, module="fake_native") is NativeHeap
    assert select_implementation("graph", prefer_native=True, module="fake_native") is Graph
    assert select_implementation("heap", prefer_native=False, module="fake_native") is BinaryHeap


def test_unknown_component_is_rejected() -> None:
    with pytest.raises(ValueError):
        select_implementation("trie")


def test_verify_parity_accepts_identical_behaviour() -> None:
    operations = [
        ("insert", (5,)),
        ("insert", (1,)),
        ("insert", (3,)),
        ("extract_root", ()),
        ("extract_root", ()),
        ("extract_root", ()),
        ("extract_root", ()),
    ]

    report = verify_parity("heap", BinaryHeap(), NativeHeap(), operations)

    assert report.operations == 7
    assert report.final_snapshot == ()


def test_verify_parity_detects_divergence() -> None:
    operations = [("insert", (2,)), ("insert", (1,)), ("extract_root", ())]

    with pytest.raises(BackendParityError) as excinfo:
        verify_parity("heap", BinaryHeap(), LossyHeap(), operations)

    assert "#3" in str(excinfo.value)


def test_verify_parity_compares_traversal_steps() -> None:
    operations = [
        ("add_node", ("A",)),
        ("add_node", ("B",)),
        ("add_edge", ("A", "B", 2)),
        ("traverse", ("dijkstra", "A")),
        ("remove_node", ("B",)),
    ]

    report = verify_parity("graph", Graph(), Graph(), operations)

    assert report.final_snapshot == {"nodes": ["A"], "edges": []}


def test_verify_parity_on_hash_tables() -> None:
    operations = [("insert", ("apple", "red")), ("delete", ("apple",)), ("search", ("apple",))]

    report = verify_parity(
        "hash_table",
        HashTable(5, "linear-probing"),
        HashTable(5, "linear-probing"),
        operations,
    )

    assert report.final_snapshot == (None,) * 5
