"""Events accepted by the reducer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from cellgraph._nodes import Id, Node, Number, _ids


@dataclass(frozen=True)
class Add:
    """Insert a new node and link it to the nodes it names."""

    node: Node


@dataclass(frozen=True)
class Set:
    """Assign a number to a Value node."""

    id: Id
    value: Number


@dataclass(frozen=True)
class Evaluate:
    """Recompute an Expression node from its dependencies."""

    id: Id


@dataclass(frozen=True)
class Remove:
    """Delete a node that nothing depends on."""

    id: Id


@dataclass(frozen=True)
class Relink:
    """Replace the dependency list of an Expression node."""

    id: Id
    dependencies: tuple[Id, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _ids(self.dependencies))


Event = Union[Add, Set, Evaluate, Remove, Relink]
