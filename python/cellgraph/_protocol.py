"""Recalculation result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

from cellgraph._nodes import Id, Number


@dataclass(frozen=True)
class NodeDelta:
    """A single expression's value change from recalculation."""

    node_id: Id
    old_value: Number | None
    new_value: Number | None
    dependencies: tuple[Id, ...] = ()  # what the new value was summed from


@dataclass(frozen=True)
class RecalcResult:
    """Result of a perturbation-driven recalculation."""

    perturbations: dict[Id, Number]  # value id -> new value
    deltas: tuple[NodeDelta, ...]  # expressions that changed
    total_expressions: int = 0
    propagated_nodes: int = 0  # expressions whose value actually changed
    max_chain_depth: int = 0  # longest dependent chain from perturbed values

    @property
    def propagation_ratio(self) -> float:
        if self.total_expressions == 0:
            return 0.0
        return self.propagated_nodes / self.total_expressions

    def delta_for(self, node_id: Id) -> NodeDelta | None:
        for delta in self.deltas:
            if delta.node_id == node_id:
                return delta
        return None
