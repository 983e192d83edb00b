"""Command line front end that replays operations on one data structure.

This module is the presentation layer: it turns structured outcomes and
traversal steps into log lines and renders snapshots, either as ``rich``
tables/trees or as JSON.  Examples::

    python -m structviz.cli heap --kind max --insert 5,3,8 --extract 1
    python -m structviz.cli avl --insert 30,20,10,25 --delete 20
    python -m structviz.cli graph --nodes A,B,C --edge A:B:4 --edge A:C:1 \\
        --edge C:B:1 --run dijkstra --start A --interval 0
    python -m structviz.cli hash --capacity 5 --strategy linear-probing \\
        --put apple=red --put pear=green --get apple
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import json
import logging
import math
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .animation.player import StepPlayer
from .animation.steps import Step, StepKind, TraversalAlgorithm
from .backends import select_implementation
from .config import ConfigError, VisualizerConfig, load_config
from .structures.binary_heap import HeapKind, rebuild_heap
from .structures.hash_table import TOMBSTONE, CollisionStrategy, rebuild_table
from .structures.results import FailureReason

logger = logging.getLogger(__name__)

console = Console()

ALGORITHM_TITLES = {
    TraversalAlgorithm.BFS: "BFS",
    TraversalAlgorithm.DFS: "DFS",
    TraversalAlgorithm.DIJKSTRA: "Dijkstra's algorithm",
    TraversalAlgorithm.PRIM: "Prim's algorithm",
}

LEVEL_STYLES = {"info": "cyan", "success": "green", "error": "red"}


@dataclass(frozen=True)
class LogEvent:
    level: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level, "message": self.message}


class EventLog:
    """Ordered log of human-readable messages produced by a session."""

    def __init__(self) -> None:
        self.events: List[LogEvent] = []

    def info(self, message: str) -> None:
        self.events.append(LogEvent("info", message))

    def success(self, message: str) -> None:
        self.events.append(LogEvent("success", message))

    def error(self, message: str) -> None:
        self.events.append(LogEvent("error", message))


# ----------------------------------------------------------------------
# Argument parsing helpers
# ----------------------------------------------------------------------
def _number(text: str) -> float | int:
    try:
        return int(text)
    except ValueError:
        try:
            value = float(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"{text!r} is not a number") from exc
        if not math.isfinite(value):
            raise argparse.ArgumentTypeError(f"{text!r} is not a finite number")
        return value


def _number_list(text: str) -> List[float | int]:
    return [_number(item.strip()) for item in text.split(",") if item.strip()]


def _node_list(text: str) -> List[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


def _node_id(text: str) -> str:
    node = text.strip()
    if not node:
        raise argparse.ArgumentTypeError("Node ids must be non-empty")
    return node


def _edge_spec(text: str) -> Tuple[str, str, float | int]:
    parts = [part.strip() for part in text.split(":")]
    if len(parts) not in (2, 3) or not all(parts):
        raise argparse.ArgumentTypeError("Edges must look like FROM:TO or FROM:TO:WEIGHT")
    weight = _number(parts[2]) if len(parts) == 3 else 1
    return parts[0], parts[1], weight


def _pair_spec(text: str) -> Tuple[str, str]:
    key, separator, value = text.partition("=")
    if not separator or not key:
        raise argparse.ArgumentTypeError("Entries must look like KEY=VALUE")
    return key, value


def _non_negative_float(text: str) -> float:
    value = _number(text)
    if value < 0:
        raise argparse.ArgumentTypeError("Interval must be non-negative")
    return float(value)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay operations on a heap, AVL tree, graph or hash table.",
    )
    parser.add_argument("--config", default=None, help="JSON or YAML configuration file.")
    parser.add_argument(
        "--output-format",
        choices=("text", "json"),
        default="text",
        help="Print a rich text rendering or a JSON document.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Configure logging verbosity for troubleshooting.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    heap = commands.add_parser("heap", help="Binary heap operations")
    heap.add_argument("--kind", choices=[kind.value for kind in HeapKind], default=None)
    heap.add_argument("--insert", type=_number_list, default=[], help="Comma separated values.")
    heap.add_argument("--extract", type=int, default=0, help="Number of root extractions.")
    heap.add_argument("--switch-kind", choices=[kind.value for kind in HeapKind], default=None)

    avl = commands.add_parser("avl", help="AVL tree operations")
    avl.add_argument("--insert", type=_number_list, default=[], help="Comma separated values.")
    avl.add_argument("--delete", type=_number_list, default=[], help="Comma separated values.")

    graph = commands.add_parser("graph", help="Graph operations and traversals")
    graph.add_argument("--nodes", type=_node_list, default=[], help="Comma separated node ids.")
    graph.add_argument("--edge", type=_edge_spec, action="append", default=[], help="FROM:TO[:WEIGHT]")
    graph.add_argument("--remove-node", type=_node_id, action="append", default=[])
    graph.add_argument("--remove-edge", type=_edge_spec, action="append", default=[], help="FROM:TO")
    graph.add_argument("--run", choices=[algorithm.value for algorithm in TraversalAlgorithm], default=None)
    graph.add_argument("--start", type=_node_id, default=None, help="Start node for --run.")
    graph.add_argument(
        "--interval",
        type=_non_negative_float,
        default=None,
        help="Seconds between traversal steps (defaults to the configured step interval).",
    )

    table = commands.add_parser("hash", help="Hash table operations")
    table.add_argument("--capacity", type=int, default=None)
    table.add_argument("--strategy", choices=[strategy.value for strategy in CollisionStrategy], default=None)
    table.add_argument("--tombstones", action="store_true", default=None)
    table.add_argument("--put", type=_pair_spec, action="append", default=[], help="KEY=VALUE")
    table.add_argument("--get", action="append", default=[], help="Key to look up.")
    table.add_argument("--delete", action="append", default=[], help="Key to delete.")
    table.add_argument("--resize", type=int, default=None, help="Rebuild with a new capacity.")
    table.add_argument(
        "--switch-strategy",
        choices=[strategy.value for strategy in CollisionStrategy],
        default=None,
        help="Rebuild with a different collision strategy.",
    )
    return parser


# ----------------------------------------------------------------------
# Sessions
# ----------------------------------------------------------------------
def run_heap(args: argparse.Namespace, config: VisualizerConfig, log: EventLog) -> Dict[str, Any]:
    heap_class = select_implementation("heap", prefer_native=config.prefer_native)
    heap = heap_class(args.kind or config.heap_kind)
    for value in args.insert:
        heap.insert(value)
        log.success(f"Inserted {value} into {heap.kind.value} heap")
    for _ in range(args.extract):
        outcome = heap.extract_root()
        if outcome.ok:
            log.success(f"Deleted {outcome.value} from {heap.kind.value} heap")
        else:
            log.error("Heap is empty")
    if args.switch_kind is not None:
        heap = rebuild_heap(heap, args.switch_kind)
        log.info(f"Switched to {heap.kind.value} heap")
    return {"kind": heap.kind.value, "array": list(heap.to_sequence())}


def run_avl(args: argparse.Namespace, config: VisualizerConfig, log: EventLog) -> Dict[str, Any]:
    tree = select_implementation("avl_tree", prefer_native=config.prefer_native)()
    for value in args.insert:
        outcome = tree.insert(value)
        if outcome.reason is FailureReason.DUPLICATE_KEY:
            log.error(f"Value {value} already exists")
            continue
        for event in outcome.detail["rotations"]:
            log.info(f"{event.case.value} rotation performed at node {event.pivot}")
        log.success(f"Inserted {value} into AVL tree")
    for value in args.delete:
        outcome = tree.delete(value)
        if not outcome.ok:
            log.error(f"Value {value} not found")
            continue
        for event in outcome.detail["rotations"]:
            log.info(f"{event.case.value} rotation performed at node {event.pivot}")
        log.success(f"Deleted {value} from AVL tree")
    snapshot = tree.snapshot()
    return {
        "in_order": tree.in_order(),
        "tree": snapshot.to_dict() if snapshot is not None else None,
    }


def describe_step(step: Step) -> str:
    """Return the log line announcing *step*."""

    if step.kind is StepKind.VISITING:
        return f"Visiting node {step.node}"
    if step.kind is StepKind.PROCESSING:
        return f"Processing node {step.node} (distance: {_format_distance(step.distance)})"
    if step.kind is StepKind.EDGE_DISCOVERED:
        return f"Discovered node {step.target} via {step.source}"
    if step.kind is StepKind.EDGE_RELAXED:
        return f"Relaxed edge {step.source} → {step.target}: distance updated to {_format_distance(step.distance)}"
    if step.kind is StepKind.EDGE_ADDED:
        return f"Added edge {step.source} → {step.target} (weight: {step.weight}) to MST"
    return f"{ALGORITHM_TITLES[step.algorithm]} completed"


def run_graph(args: argparse.Namespace, config: VisualizerConfig, log: EventLog) -> Dict[str, Any]:
    graph = select_implementation("graph", prefer_native=config.prefer_native)()
    for node in args.nodes:
        if graph.add_node(node).ok:
            log.success(f"Added node {node}")
        else:
            log.error(f"Node {node} already exists")
    for source, target, weight in args.edge:
        outcome = graph.add_edge(source, target, weight)
        if not outcome.ok:
            log.error("Both nodes must exist")
        elif outcome.detail["created"]:
            log.success(f"Added edge {source} → {target} (weight: {weight})")
    for node in args.remove_node:
        if graph.remove_node(node).ok:
            log.success(f"Removed node {node}")
        else:
            log.error(f"Node {node} does not exist")
    for source, target, _ in args.remove_edge:
        if graph.remove_edge(source, target).detail["removed"]:
            log.success(f"Removed edge {source} → {target}")

    snapshot: Dict[str, Any] = graph.as_dict()
    if args.run is None:
        return snapshot
    if args.start is None:
        log.error("Please enter a start node")
        return snapshot

    algorithm = TraversalAlgorithm(args.run)
    outcome = graph.traverse(algorithm, args.start)
    if not outcome.ok:
        log.error(f"Node {args.start} does not exist")
        return snapshot

    log.info(f"Starting {ALGORITHM_TITLES[algorithm]} from node {args.start}")
    interval = config.step_interval if args.interval is None else args.interval
    traversal = outcome.value
    player = StepPlayer(
        traversal,
        interval=interval,
        on_step=lambda step: _log_step(log, step),
    )
    steps = player.run()
    snapshot["traversal"] = traversal.summary.as_dict()
    snapshot["steps"] = [step.as_dict() for step in steps]
    return snapshot


def _log_step(log: EventLog, step: Step) -> None:
    if step.kind is StepKind.COMPLETED:
        log.success(describe_step(step))
    else:
        log.info(describe_step(step))


def run_hash(args: argparse.Namespace, config: VisualizerConfig, log: EventLog) -> Dict[str, Any]:
    config = config.with_overrides(
        table_capacity=args.capacity,
        collision_strategy=args.strategy,
        tombstones=args.tombstones,
    )
    table_class = select_implementation("hash_table", prefer_native=config.prefer_native)
    table = table_class(
        config.table_capacity,
        config.collision_strategy,
        tombstones=config.tombstones,
    )
    for key, value in args.put:
        outcome = table.insert(key, value)
        if not outcome.ok:
            log.error("Hash table is full")
        elif outcome.detail["updated"]:
            log.info(f"Updated key {key} at index {outcome.detail['index']}")
        else:
            log.success(f"Inserted {key}:{value} at index {outcome.detail['index']}")
    for key in args.get:
        outcome = table.search(key)
        if outcome.ok:
            log.success(f"Found {key}:{outcome.value} at index {outcome.detail['index']}")
        else:
            log.error(f"Key {key} not found")
    for key in args.delete:
        outcome = table.delete(key)
        if outcome.ok:
            log.success(f"Deleted key {key} from index {outcome.detail['index']}")
        else:
            log.error(f"Key {key} not found")

    if args.resize is not None or args.switch_strategy is not None:
        rebuilt = rebuild_table(
            table,
            args.resize,
            args.switch_strategy,
            bounds=config.capacity_bounds,
        )
        if rebuilt.reason is FailureReason.INVALID_CAPACITY:
            low, high = config.capacity_bounds
            log.error(f"Table size must be between {low} and {high}")
        else:
            table = rebuilt.value
            for key, _ in rebuilt.detail["dropped"]:
                log.error(f"Key {key} dropped: hash table is full")
            log.info(f"Hash table rebuilt with size {table.capacity} using {table.strategy.value}")

    return {
        "capacity": table.capacity,
        "strategy": table.strategy.value,
        "slots": [_slot_payload(slot) for slot in table.slots()],
    }


def _slot_payload(slot: Any) -> Any:
    if slot is None:
        return None
    if slot is TOMBSTONE:
        return "<deleted>"
    if slot and isinstance(slot[0], tuple):
        return [list(entry) for entry in slot]
    return list(slot)


SESSIONS: Dict[str, Callable[[argparse.Namespace, VisualizerConfig, EventLog], Dict[str, Any]]] = {
    "heap": run_heap,
    "avl": run_avl,
    "graph": run_graph,
    "hash": run_hash,
}


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------
def _format_distance(value: Optional[float]) -> str:
    if value is None or math.isinf(value):
        return "∞"
    return f"{value:g}"


def _avl_branch(parent: Tree, payload: Optional[Dict[str, Any]], label: str) -> None:
    if payload is None:
        parent.add(f"[dim]{label}: ·[/]")
        return
    branch = parent.add(f"{label}: {payload['value']} (h={payload['height']}, b={payload['balance']})")
    if payload["left"] is not None or payload["right"] is not None:
        _avl_branch(branch, payload["left"], "L")
        _avl_branch(branch, payload["right"], "R")


def render_snapshot(command: str, snapshot: Dict[str, Any], target: Console) -> None:
    """Print *snapshot* for *command* using rich renderables."""

    if command == "heap":
        target.print(f"[bold]{snapshot['kind']} heap[/] array: {snapshot['array']}")
    elif command == "avl":
        root = snapshot["tree"]
        if root is None:
            target.print("AVL tree is empty")
            return
        tree = Tree(f"{root['value']} (h={root['height']}, b={root['balance']})")
        if root["left"] is not None or root["right"] is not None:
            _avl_branch(tree, root["left"], "L")
            _avl_branch(tree, root["right"], "R")
        target.print(tree)
    elif command == "graph":
        table = Table(title=f"Graph ({len(snapshot['nodes'])} nodes)")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Weight", justify="right")
        for edge in snapshot["edges"]:
            table.add_row(escape(edge["source"]), escape(edge["target"]), str(edge["weight"]))
        target.print(table)
        if "traversal" in snapshot:
            summary = snapshot["traversal"]
            target.print(f"Order: {escape(' → '.join(summary['order']))}")
            if summary["distances"]:
                rendered = ", ".join(
                    f"{node}: {'∞' if value == 'inf' else value}"
                    for node, value in summary["distances"].items()
                )
                target.print(f"Distances: {rendered}")
    elif command == "hash":
        table = Table(title=f"Hash table ({snapshot['strategy']}, size {snapshot['capacity']})")
        table.add_column("Index", justify="right")
        table.add_column("Contents")
        for index, slot in enumerate(snapshot["slots"]):
            if slot is None or slot == []:
                contents = "[dim]empty[/]"
            elif isinstance(slot, str):
                contents = escape(slot)
            elif isinstance(slot[0], list):
                contents = " → ".join(escape(f"{key}:{value}") for key, value in slot)
            else:
                contents = escape(f"{slot[0]}:{slot[1]}")
            table.add_row(str(index), contents)
        target.print(table)


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        log = EventLog()
        snapshot = SESSIONS[args.command](args, config, log)
    except ConfigError as error:
        logger.error("%s", error)
        return 2

    if args.output_format == "json":
        payload = {
            "command": args.command,
            "events": [event.to_dict() for event in log.events],
            "snapshot": snapshot,
        }
        print(json.dumps(payload, ensure_ascii=False))
    else:
        for event in log.events:
            console.print(f"[{LEVEL_STYLES[event.level]}]{escape(event.message)}[/]", highlight=False)
        render_snapshot(args.command, snapshot, console)

    return 0 if not any(event.level == "error" for event in log.events) else 1


if __name__ == "__main__":  # pragma: no cover - exercised via CLI
    sys.exit(main())
