"""Structural invariant checks for graph snapshots."""

from __future__ import annotations

from dataclasses import dataclass

from cellgraph._errors import CycleError, InvariantError
from cellgraph._graph import DependencyGraph
from cellgraph._nodes import Expression, Number
from cellgraph._store import Graph

DEFAULT_TOLERANCE = 1e-10

# Invariant names, in the order they are checked
TYPE = "type"
SYMMETRY = "symmetry"
ACYCLIC = "acyclic"
UNIQUE = "unique"
CONSISTENCY = "consistency"


@dataclass(frozen=True)
class Violation:
    """One broken invariant on one node."""

    invariant: str
    node_id: str
    message: str


def expression_sum(graph: Graph, expression: Expression) -> Number:
    """Sum the distinct dependencies of *expression* that exist in *graph*."""
    total: Number = 0
    for dep_id in dict.fromkeys(expression.dependencies):
        dep = graph.get(dep_id)
        if dep is not None:
            total += dep.value
    return total


def violations(graph: Graph, tolerance: float = DEFAULT_TOLERANCE) -> list[Violation]:
    """Every invariant violation in *graph*; empty when the snapshot is sound.

    Id uniqueness is enforced by ``Graph`` itself, so only duplicates inside
    a node's own id lists are reported under ``unique``.
    """
    found: list[Violation] = []

    for node in graph:
        if len(set(node.dependents)) != len(node.dependents):
            found.append(Violation(UNIQUE, node.id, "dependents lists an id twice"))

        for dep_id in node.dependents:
            dependent = graph.get(dep_id)
            if dependent is None:
                found.append(Violation(SYMMETRY, node.id, f"dependent {dep_id!r} does not exist"))
            elif not isinstance(dependent, Expression):
                found.append(Violation(TYPE, node.id, f"dependent {dep_id!r} is a Value"))
            elif node.id not in dependent.dependencies:
                found.append(Violation(
                    SYMMETRY, node.id, f"{dep_id!r} does not list {node.id!r} as a dependency",
                ))

        if not isinstance(node, Expression):
            continue

        for dep_id in node.dependencies:
            dependency = graph.get(dep_id)
            if dependency is not None and node.id not in dependency.dependents:
                found.append(Violation(
                    SYMMETRY, node.id, f"{dep_id!r} does not list {node.id!r} as a dependent",
                ))

        expected = expression_sum(graph, node)
        if abs(float(node.value) - float(expected)) > tolerance:
            found.append(Violation(
                CONSISTENCY, node.id, f"value {node.value!r} but dependencies sum to {expected!r}",
            ))

    try:
        DependencyGraph.from_graph(graph).topological_order()
    except CycleError as e:
        for node_id in e.node_ids:
            found.append(Violation(ACYCLIC, node_id, "cannot be ordered: dependency cycle"))

    return found


def check(graph: Graph, tolerance: float = DEFAULT_TOLERANCE) -> Graph:
    """Return *graph* unchanged, or raise InvariantError listing what is wrong."""
    found = violations(graph, tolerance)
    if found:
        raise InvariantError(found)
    return graph
