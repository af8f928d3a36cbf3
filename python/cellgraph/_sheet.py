"""Sheet: holds the latest settled graph and serializes events against it."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Iterable

from cellgraph._events import Add, Event, Relink, Remove, Set
from cellgraph._graph import DependencyGraph
from cellgraph._invariants import DEFAULT_TOLERANCE
from cellgraph._nodes import Expression, Id, Node, Number, Value
from cellgraph._protocol import NodeDelta, RecalcResult
from cellgraph._reducer import reduce
from cellgraph._refs import expression
from cellgraph._store import Graph

logger = logging.getLogger(__name__)

Listener = Callable[[Graph, Event], None]


def _values_differ(a: Number | None, b: Number | None, tolerance: float) -> bool:
    """Check if two values differ beyond tolerance."""
    if a is None and b is None:
        return False
    if a is None or b is None:
        return True
    return abs(float(a) - float(b)) > tolerance


class Sheet:
    """Event-driven front end for a cell graph.

    Usage::

        sheet = Sheet()
        sheet.add_value("a", 1)
        sheet.add_value("b", 2)
        sheet.add_expression("total", "=a+b")
        sheet.set_value("a", 10)
        sheet.value("total")  # 12

    Events are applied one at a time to the latest settled graph.  An event
    dispatched while another is being applied (from a listener, or another
    thread) waits for the running cascade to finish.
    """

    def __init__(self, graph: Graph | None = None) -> None:
        self._graph = graph if graph is not None else Graph()
        self._pending: deque[Event] = deque()
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._draining = False

    @property
    def graph(self) -> Graph:
        return self._graph

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, event: Event) -> Graph:
        """Queue *event* and apply everything pending.

        Returns the graph settled after the queue drains.  A call made from
        inside a listener only queues; the outer call applies it.  If a
        listener raises, events still queued are dropped and the error
        propagates; the graph keeps every event applied before it.
        """
        with self._lock:
            self._pending.append(event)
            if self._draining:
                return self._graph
            self._draining = True
            try:
                while self._pending:
                    current = self._pending.popleft()
                    before = self._graph
                    after = reduce(before, current)
                    if after is before:
                        logger.debug("Event left the graph unchanged: %r", current)
                        continue
                    self._graph = after
                    self._notify(after, current)
            except Exception:
                if self._pending:
                    logger.warning(
                        "Dropping %d queued event(s) after listener error", len(self._pending),
                    )
                    self._pending.clear()
                raise
            finally:
                self._draining = False
            return self._graph

    def dispatch_all(self, events: Iterable[Event]) -> Graph:
        for event in events:
            self.dispatch(event)
        return self._graph

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every event that changes the graph.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, graph: Graph, event: Event) -> None:
        for listener in list(self._listeners):
            listener(graph, event)

    # ------------------------------------------------------------------
    # Shortcuts
    # ------------------------------------------------------------------

    def add(self, node: Node) -> Graph:
        return self.dispatch(Add(node))

    def add_value(self, node_id: Id, value: Number = 0) -> Graph:
        return self.dispatch(Add(Value(node_id, value)))

    def add_expression(self, node_id: Id, formula: str | Iterable[Id]) -> Graph:
        """Add an expression from ``"=a+SUM(B1:B3)"`` or a list of ids."""
        return self.dispatch(Add(expression(node_id, formula)))

    def set_value(self, node_id: Id, value: Number) -> Graph:
        return self.dispatch(Set(node_id, value))

    def remove(self, node_id: Id) -> Graph:
        return self.dispatch(Remove(node_id))

    def relink(self, node_id: Id, formula: str | Iterable[Id]) -> Graph:
        return self.dispatch(Relink(node_id, expression(node_id, formula).dependencies))

    # ------------------------------------------------------------------
    # Snapshot reads
    # ------------------------------------------------------------------

    def value(self, node_id: Id) -> Number | None:
        node = self._graph.get(node_id)
        return None if node is None else node.value

    def is_editable(self, node_id: Id) -> bool:
        """Values accept input; expressions are read-only."""
        return isinstance(self._graph.get(node_id), Value)

    def __getitem__(self, node_id: Id) -> Node:
        node = self._graph.get(node_id)
        if node is None:
            raise KeyError(f"Node {node_id!r} does not exist")
        return node

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __len__(self) -> int:
        return len(self._graph)

    def __repr__(self) -> str:
        return f"<Sheet nodes={self._graph.ids()}>"

    # ------------------------------------------------------------------
    # Recalculation
    # ------------------------------------------------------------------

    def recalculate(
        self,
        perturbations: dict[Id, Number],
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> RecalcResult:
        """Set several values and report which expressions changed.

        Raises RuntimeError when called from a listener, where the sets
        could only be queued.
        """
        with self._lock:
            if self._draining:
                raise RuntimeError("recalculate() cannot run while events are being applied")
            before = self._graph
            old_values = {
                node.id: node.value for node in before if isinstance(node, Expression)
            }

            for node_id, value in perturbations.items():
                self.dispatch(Set(node_id, value))
            after = self._graph

            index = DependencyGraph.from_graph(after)
            affected = index.affected(perturbations)

            deltas: list[NodeDelta] = []
            for node_id in affected:
                node = after.get(node_id)
                if not isinstance(node, Expression):
                    continue
                old_val = old_values.get(node_id)
                if _values_differ(old_val, node.value, tolerance):
                    deltas.append(NodeDelta(
                        node_id=node_id,
                        old_value=old_val,
                        new_value=node.value,
                        dependencies=node.dependencies,
                    ))

            return RecalcResult(
                perturbations=dict(perturbations),
                deltas=tuple(deltas),
                total_expressions=len(index.expressions),
                propagated_nodes=len(deltas),
                max_chain_depth=index.max_depth(perturbations),
            )
