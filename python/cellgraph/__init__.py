"""cellgraph — a reactive graph of summing cells.

Usage::

    from cellgraph import Add, Expression, Graph, Set, Value, reduce

    graph = Graph()
    graph = reduce(graph, Add(Value("a", 0)))
    graph = reduce(graph, Add(Value("b", 0)))
    graph = reduce(graph, Add(Expression("aPlusB", dependencies=["a", "b"])))

    graph = reduce(graph, Set("a", 1))
    graph = reduce(graph, Set("b", 2))
    print(graph.get("aPlusB").value)  # 3

For an event loop that keeps the latest graph, use :class:`Sheet`.
"""

from cellgraph._errors import (
    CycleError,
    DuplicateIdError,
    FormulaError,
    GraphError,
    InvariantError,
)
from cellgraph._events import Add, Evaluate, Event, Relink, Remove, Set
from cellgraph._graph import DependencyGraph
from cellgraph._invariants import DEFAULT_TOLERANCE, Violation, check, violations
from cellgraph._nodes import Expression, Id, Node, Number, Value
from cellgraph._protocol import NodeDelta, RecalcResult
from cellgraph._reducer import reduce, reduce_all
from cellgraph._refs import expand_range, expression, parse_formula
from cellgraph._sheet import Sheet
from cellgraph._store import Graph

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Add",
    "CycleError",
    "DEFAULT_TOLERANCE",
    "DependencyGraph",
    "DuplicateIdError",
    "Evaluate",
    "Event",
    "Expression",
    "FormulaError",
    "Graph",
    "GraphError",
    "Id",
    "InvariantError",
    "Node",
    "NodeDelta",
    "Number",
    "RecalcResult",
    "Relink",
    "Remove",
    "Set",
    "Sheet",
    "Value",
    "Violation",
    "check",
    "expand_range",
    "expression",
    "parse_formula",
    "reduce",
    "reduce_all",
    "violations",
]
