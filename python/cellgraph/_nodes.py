"""Node types: directly settable values and summing expressions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Union

Id = str
Number = Union[int, float]


def _ids(values: Iterable[Id]) -> tuple[Id, ...]:
    if isinstance(values, str):
        # A bare string would otherwise be split into characters
        return (values,)
    return tuple(values)


def is_number(value: object) -> bool:
    """``True`` for ints and floats, ``False`` for bools and everything else."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Value:
    """A cell holding a number set directly by the user."""

    id: Id
    value: Number = 0
    dependents: tuple[Id, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependents", _ids(self.dependents))

    def with_value(self, value: Number) -> Value:
        return replace(self, value=value)

    def with_dependents(self, dependents: Iterable[Id]) -> Value:
        return replace(self, dependents=_ids(dependents))


@dataclass(frozen=True)
class Expression:
    """A cell whose value is the sum of the cells named in ``dependencies``.

    ``value`` is a cache recomputed by evaluation, never set by callers.
    """

    id: Id
    value: Number = 0
    dependencies: tuple[Id, ...] = field(default=())
    dependents: tuple[Id, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _ids(self.dependencies))
        object.__setattr__(self, "dependents", _ids(self.dependents))

    def with_value(self, value: Number) -> Expression:
        return replace(self, value=value)

    def with_dependents(self, dependents: Iterable[Id]) -> Expression:
        return replace(self, dependents=_ids(dependents))

    def with_dependencies(self, dependencies: Iterable[Id]) -> Expression:
        return replace(self, dependencies=_ids(dependencies))


Node = Union[Value, Expression]
