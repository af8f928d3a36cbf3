"""Graph — immutable, insertion-ordered collection of nodes keyed by id.

Every mutating operation returns a new ``Graph``; the original is never
touched.  The store does not enforce linking or acyclicity, that is the
reducer's job at the point an event is applied.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from cellgraph._errors import DuplicateIdError
from cellgraph._nodes import Id, Node, Number


class Graph:
    """A snapshot of every node, unique by id."""

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self._nodes: dict[Id, Node] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise DuplicateIdError(node.id)
            self._nodes[node.id] = node

    @classmethod
    def _from_dict(cls, nodes: dict[Id, Node]) -> Graph:
        graph = object.__new__(cls)
        graph._nodes = nodes
        return graph

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    def get(self, node_id: Id) -> Node | None:
        return self._nodes.get(node_id)

    def set(self, node: Node) -> Graph:
        """Replace the node sharing ``node.id``, or append it if absent."""
        nodes = dict(self._nodes)
        nodes[node.id] = node
        return Graph._from_dict(nodes)

    def contains(self, node_id: Id) -> bool:
        return node_id in self._nodes

    def remove(self, node_id: Id) -> Graph:
        if node_id not in self._nodes:
            return self
        nodes = dict(self._nodes)
        del nodes[node_id]
        return Graph._from_dict(nodes)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    def ids(self) -> list[Id]:
        return list(self._nodes)

    def values(self) -> dict[Id, Number]:
        """Map each id to its current value, in graph order."""
        return {node_id: node.value for node_id, node in self._nodes.items()}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self.nodes == other.nodes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Graph({list(self._nodes.values())!r})"


def get(graph: Graph, node_id: Id) -> Node | None:
    return graph.get(node_id)


def set(graph: Graph, node: Node) -> Graph:  # noqa: A001
    return graph.set(node)


def contains(graph: Graph, node_id: Id) -> bool:
    return graph.contains(node_id)
