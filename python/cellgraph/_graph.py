"""Dependency index over a graph snapshot with topological ordering."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from cellgraph._errors import CycleError
from cellgraph._nodes import Expression, Id
from cellgraph._store import Graph


class DependencyGraph:
    """Forward and reverse edges of a snapshot, for evaluation ordering.

    Edge lists keep the order stored on the nodes so every ordering derived
    from them is deterministic.
    """

    __slots__ = ("dependencies", "dependents", "expressions")

    def __init__(self) -> None:
        # node -> nodes it reads from (existing nodes only)
        self.dependencies: dict[Id, list[Id]] = {}
        # node -> nodes that read from it (reverse edges)
        self.dependents: dict[Id, list[Id]] = {}
        # expression ids, in graph order
        self.expressions: list[Id] = []

    @classmethod
    def from_graph(cls, graph: Graph) -> DependencyGraph:
        index = cls()
        for node in graph:
            index.dependents[node.id] = [d for d in node.dependents if d in graph]
            if isinstance(node, Expression):
                index.expressions.append(node.id)
                index.dependencies[node.id] = [d for d in node.dependencies if d in graph]
            else:
                index.dependencies[node.id] = []
        return index

    def topological_order(self, ids: Iterable[Id] | None = None) -> list[Id]:
        """Return expressions (or *ids*) in evaluation order (Kahn's algorithm).

        Ties keep the order of *ids*.  Raises CycleError if the subset
        cannot be fully ordered.
        """
        subset = list(self.expressions if ids is None else ids)
        if not subset:
            return []
        members = dict.fromkeys(subset)

        # Both counts and decrements follow the dependencies edges, so a
        # one-sided link on a node cannot stall the ordering
        in_degree: dict[Id, int] = {}
        readers: dict[Id, list[Id]] = {n: [] for n in subset}
        for node_id in subset:
            deps = [d for d in dict.fromkeys(self.dependencies.get(node_id, [])) if d in members]
            in_degree[node_id] = len(deps)
            for dep in deps:
                readers[dep].append(node_id)

        queue: deque[Id] = deque(n for n in subset if in_degree[n] == 0)
        order: list[Id] = []
        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for reader in readers[node_id]:
                in_degree[reader] -= 1
                if in_degree[reader] == 0:
                    queue.append(reader)

        if len(order) != len(subset):
            raise CycleError(set(subset) - set(order))
        return order

    def _discover(self, changed: Iterable[Id]) -> list[Id]:
        """Transitive dependents of *changed* in depth-first discovery order."""
        seen: set[Id] = set()
        found: list[Id] = []
        # (node, reached through a dependents edge)
        stack: list[tuple[Id, bool]] = [(r, False) for r in reversed(list(changed))]
        while stack:
            node_id, is_dependent = stack.pop()
            if is_dependent:
                found.append(node_id)
            for dep in reversed(self.dependents.get(node_id, [])):
                if dep not in seen:
                    seen.add(dep)
                    stack.append((dep, True))
        return found

    def affected(self, changed: Iterable[Id]) -> list[Id]:
        """All transitive dependents of *changed*, in evaluation order."""
        return self.topological_order(self._discover(changed))

    def max_depth(self, roots: Iterable[Id]) -> int:
        """Longest dependent chain starting from the root nodes."""
        roots = set(roots)
        if not roots:
            return 0

        depth: dict[Id, int] = {r: 0 for r in roots}
        queue: deque[Id] = deque(roots)
        max_d = 0

        while queue:
            node_id = queue.popleft()
            current_depth = depth[node_id]
            for dep in self.dependents.get(node_id, []):
                new_depth = current_depth + 1
                if dep not in depth or new_depth > depth[dep]:
                    depth[dep] = new_depth
                    max_d = max(max_d, new_depth)
                    queue.append(dep)

        return max_d

    def reaches(self, start: Id, target: Id) -> bool:
        """Whether *target* is a transitive dependency of *start*."""
        seen: set[Id] = set()
        stack = list(self.dependencies.get(start, []))
        while stack:
            node_id = stack.pop()
            if node_id == target:
                return True
            if node_id in seen:
                continue
            seen.add(node_id)
            stack.extend(self.dependencies.get(node_id, []))
        return False
