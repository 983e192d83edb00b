"""Command line walkthrough of the four AVL rebalancing cases.

Each demo case inserts three keys into an empty
``structviz.structures.avl_tree.AVLTree`` in an order that triggers exactly
one rebalancing case (``LL``, ``RR``, ``LR`` or ``RL``).  The script prints
the reported rotation, the resulting level-order rendering and whether the
tree is still height balanced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence

from structviz.structures.avl_tree import (
    AVLTree,
    RotationCase,
    RotationEvent,
    is_balanced,
    render_tree,
)


@dataclass(frozen=True)
class DemoCase:
    """Insertion order paired with the rotation it is expected to trigger."""

    name: str
    values: Sequence[int]
    expected_case: RotationCase

    def build(self) -> tuple[AVLTree, List[RotationEvent]]:
        """Insert the values and collect every reported rotation."""

        tree = AVLTree()
        events: List[RotationEvent] = []
        for value in self.values:
            events.extend(tree.insert(value).detail["rotations"])
        return tree, events


def _iter_demo_cases() -> Iterator[DemoCase]:
    """Yield the built-in demonstration cases."""

    yield DemoCase(name="Left-Left", values=(3, 2, 1), expected_case=RotationCase.LL)
    yield DemoCase(name="Right-Right", values=(1, 2, 3), expected_case=RotationCase.RR)
    yield DemoCase(name="Left-Right", values=(3, 1, 2), expected_case=RotationCase.LR)
    yield DemoCase(name="Right-Left", values=(1, 3, 2), expected_case=RotationCase.RL)


def _format_report(case: DemoCase, tree: AVLTree, events: List[RotationEvent]) -> List[str]:
    """Return formatted output lines for *case* and its *tree*."""

    if len(events) != 1 or events[0].case is not case.expected_case:
        raise RuntimeError(
            "Demo case expectation mismatch:"
            f" {case.name} expected a single {case.expected_case.value} rotation"
            f" but received {[event.case.value for event in events]}"
        )

    event = events[0]
    inserted = ", ".join(str(value) for value in case.values)
    balanced = "Yes" if is_balanced(tree.root) else "No"
    return [
        f"{case.name} ({inserted}): {event.case.value} rotation at {event.pivot}",
        render_tree(tree.root),
        f"Balanced? {balanced}",
    ]


def main() -> None:
    """Execute the demonstration flow for all configured cases."""

    for case in _iter_demo_cases():
        tree, events = case.build()
        for line in _format_report(case, tree, events):
            print(line)
        print()  # Spacer between cases


if __name__ == "__main__":
    main()
