"""Exceptions raised where callers construct graphs, formulas, or orderings.

The reducer itself never raises: rejected events leave the graph unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from cellgraph._invariants import Violation


class GraphError(ValueError):
    """Base class for cellgraph errors."""


class DuplicateIdError(GraphError):
    """Two nodes were given the same id."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate node id: {node_id!r}")
        self.node_id = node_id


class CycleError(GraphError):
    """The dependency relation contains a cycle."""

    def __init__(self, node_ids: Iterable[str]) -> None:
        self.node_ids = sorted(node_ids)
        super().__init__(f"Circular reference detected involving: {self.node_ids}")


class FormulaError(GraphError):
    """A formula is not a sum of references."""


class InvariantError(GraphError):
    """A graph snapshot breaks one or more structural invariants."""

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = violations
        lines = "\n".join(f"  [{v.invariant}] {v.node_id}: {v.message}" for v in violations)
        super().__init__(f"{len(violations)} invariant violation(s):\n{lines}")
