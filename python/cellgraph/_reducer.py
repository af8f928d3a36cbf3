"""Reducer: apply one event to a graph and cascade re-evaluation.

``reduce(graph, event)`` is pure.  It returns a new, fully settled graph, or
the input graph itself when the event is rejected.  Rejections never raise;
they are logged at DEBUG level.

Dispatch order for each event:

1. Look up the target (``Add`` checks for a duplicate id instead)
2. Check the node kind and, for link-changing events, acyclicity
3. Replace the affected nodes through the store
4. Re-evaluate every transitive dependent in topological order
"""

from __future__ import annotations

import logging
from typing import Iterable

from cellgraph._errors import CycleError
from cellgraph._events import Add, Evaluate, Event, Relink, Remove, Set
from cellgraph._graph import DependencyGraph
from cellgraph._invariants import expression_sum
from cellgraph._nodes import Expression, Id, Node, Number, Value, is_number
from cellgraph._store import Graph

logger = logging.getLogger(__name__)


def reduce(graph: Graph, event: Event) -> Graph:
    """Apply *event* to *graph* and return the settled result."""
    if isinstance(event, Add):
        return _add(graph, event.node)
    if isinstance(event, Set):
        return _set(graph, event.id, event.value)
    if isinstance(event, Evaluate):
        return _evaluate(graph, event.id)
    if isinstance(event, Remove):
        return _remove(graph, event.id)
    if isinstance(event, Relink):
        return _relink(graph, event.id, event.dependencies)
    logger.debug("Ignoring unsupported event %r", event)
    return graph


def reduce_all(graph: Graph, events: Iterable[Event]) -> Graph:
    """Apply *events* one after another, each to the previous result."""
    for event in events:
        graph = reduce(graph, event)
    return graph


# ---------------------------------------------------------------------------
# Propagation
# ---------------------------------------------------------------------------


def _propagate(graph: Graph, changed: Id) -> Graph | None:
    """Re-evaluate every transitive dependent of *changed*.

    Each affected expression is evaluated once, after all of its affected
    dependencies.  Returns None when the affected nodes cannot be ordered.
    """
    try:
        order = DependencyGraph.from_graph(graph).affected([changed])
    except CycleError as e:
        logger.warning("Abandoning propagation from %r: %s", changed, e)
        return None

    for node_id in order:
        node = graph.get(node_id)
        if isinstance(node, Expression):
            graph = graph.set(node.with_value(expression_sum(graph, node)))
    return graph


def _settle(original: Graph, updated: Graph, changed: Id) -> Graph:
    settled = _propagate(updated, changed)
    return original if settled is None else settled


def _link(graph: Graph, dependency_ids: Iterable[Id], dependent_id: Id) -> Graph:
    """Record *dependent_id* on each existing dependency."""
    for dep_id in dependency_ids:
        dep = graph.get(dep_id)
        if dep is not None and dependent_id not in dep.dependents:
            graph = graph.set(dep.with_dependents(dep.dependents + (dependent_id,)))
    return graph


def _unlink(graph: Graph, dependency_ids: Iterable[Id], dependent_id: Id) -> Graph:
    for dep_id in dependency_ids:
        dep = graph.get(dep_id)
        if dep is not None and dependent_id in dep.dependents:
            graph = graph.set(dep.with_dependents(d for d in dep.dependents if d != dependent_id))
    return graph


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------


def _add(graph: Graph, node: Node) -> Graph:
    if not isinstance(node, (Value, Expression)):
        logger.debug("Add rejected: %r is not a node", node)
        return graph
    if graph.contains(node.id):
        logger.debug("Add rejected: duplicate id %r", node.id)
        return graph
    if isinstance(node, Value) and not is_number(node.value):
        logger.debug("Add rejected: %r has non-numeric value %r", node.id, node.value)
        return graph

    dependencies: tuple[Id, ...] = ()
    if isinstance(node, Expression):
        dependencies = tuple(dict.fromkeys(node.dependencies))
        if node.id in dependencies:
            logger.debug("Add rejected: %r depends on itself", node.id)
            return graph

    declared = tuple(dict.fromkeys(node.dependents))
    for dep_id in declared:
        dependent = graph.get(dep_id)
        if not isinstance(dependent, Expression) or node.id not in dependent.dependencies:
            logger.debug("Add rejected: %r cannot be a dependent of %r", dep_id, node.id)
            return graph

    # Expressions that already reference this id as a dangling dependency
    adopted = tuple(
        n.id for n in graph
        if isinstance(n, Expression) and node.id in n.dependencies and n.id not in declared
    )
    dependents = declared + adopted

    if dependencies and dependents:
        index = DependencyGraph.from_graph(graph)
        for dep_id in dependencies:
            for dependent_id in dependents:
                if dep_id == dependent_id or index.reaches(dep_id, dependent_id):
                    logger.debug(
                        "Add rejected: %r -> %r would close a cycle", node.id, dep_id,
                    )
                    return graph

    if isinstance(node, Expression):
        new_node: Node = node.with_dependencies(dependencies).with_dependents(dependents)
    else:
        new_node = node.with_dependents(dependents)

    updated = _link(graph.set(new_node), dependencies, node.id)
    if isinstance(new_node, Expression):
        updated = updated.set(new_node.with_value(expression_sum(updated, new_node)))
    if not dependents:
        return updated
    return _settle(graph, updated, node.id)


def _set(graph: Graph, node_id: Id, value: Number) -> Graph:
    target = graph.get(node_id)
    if target is None:
        logger.debug("Set ignored: no node %r", node_id)
        return graph
    if not isinstance(target, Value):
        logger.debug("Set ignored: %r is an expression", node_id)
        return graph
    if not is_number(value):
        logger.debug("Set ignored: %r is not a number", value)
        return graph
    return _settle(graph, graph.set(target.with_value(value)), node_id)


def _evaluate(graph: Graph, node_id: Id) -> Graph:
    target = graph.get(node_id)
    if target is None:
        logger.debug("Evaluate ignored: no node %r", node_id)
        return graph
    if not isinstance(target, Expression):
        logger.debug("Evaluate ignored: %r is a value", node_id)
        return graph
    updated = graph.set(target.with_value(expression_sum(graph, target)))
    return _settle(graph, updated, node_id)


def _remove(graph: Graph, node_id: Id) -> Graph:
    target = graph.get(node_id)
    if target is None:
        logger.debug("Remove ignored: no node %r", node_id)
        return graph
    if target.dependents:
        logger.debug("Remove rejected: %r still has dependents %r", node_id, target.dependents)
        return graph
    updated = graph.remove(node_id)
    if isinstance(target, Expression):
        updated = _unlink(updated, target.dependencies, node_id)
    return updated


def _relink(graph: Graph, node_id: Id, dependencies: Iterable[Id]) -> Graph:
    target = graph.get(node_id)
    if target is None:
        logger.debug("Relink ignored: no node %r", node_id)
        return graph
    if not isinstance(target, Expression):
        logger.debug("Relink ignored: %r is a value", node_id)
        return graph

    new_deps = tuple(dict.fromkeys(dependencies))
    if node_id in new_deps:
        logger.debug("Relink rejected: %r depends on itself", node_id)
        return graph
    index = DependencyGraph.from_graph(graph)
    for dep_id in new_deps:
        if index.reaches(dep_id, node_id):
            logger.debug("Relink rejected: %r -> %r would close a cycle", node_id, dep_id)
            return graph

    dropped = [d for d in target.dependencies if d not in new_deps]
    added = [d for d in new_deps if d not in target.dependencies]
    updated = _link(_unlink(graph, dropped, node_id), added, node_id)

    relinked = target.with_dependencies(new_deps)
    updated = updated.set(relinked.with_value(expression_sum(updated, relinked)))
    return _settle(graph, updated, node_id)
