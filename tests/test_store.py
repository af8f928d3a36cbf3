"""Tests for the Graph store and node types."""

from __future__ import annotations

import pytest
from cellgraph import DuplicateIdError, Expression, Graph, GraphError, Value
from cellgraph._store import contains, get, set as store_set


class TestNodes:
    def test_id_lists_become_tuples(self) -> None:
        node = Expression("e", dependencies=["a", "b"], dependents=["f"])
        assert node.dependencies == ("a", "b")
        assert node.dependents == ("f",)

    def test_bare_string_is_one_id(self) -> None:
        assert Value("a", dependents="total").dependents == ("total",)

    def test_with_value_copies(self) -> None:
        node = Value("a", 1)
        updated = node.with_value(5)
        assert updated == Value("a", 5)
        assert node.value == 1

    def test_nodes_are_frozen(self) -> None:
        node = Value("a", 1)
        with pytest.raises(AttributeError):
            node.value = 2  # type: ignore[misc]

    def test_value_and_expression_never_equal(self) -> None:
        assert Value("a", 0) != Expression("a", 0)


class TestGraphStore:
    def test_get(self) -> None:
        graph = Graph([Value("a", 1)])
        assert graph.get("a") == Value("a", 1)
        assert graph.get("missing") is None

    def test_contains(self) -> None:
        graph = Graph([Value("a", 1)])
        assert graph.contains("a")
        assert "a" in graph
        assert not graph.contains("b")

    def test_set_replaces_in_place(self) -> None:
        graph = Graph([Value("a", 1), Value("b", 2), Value("c", 3)])
        updated = graph.set(Value("b", 20))
        assert updated.ids() == ["a", "b", "c"]
        assert updated.get("b") == Value("b", 20)

    def test_set_appends_unknown_id(self) -> None:
        graph = Graph([Value("a", 1)])
        updated = graph.set(Value("z", 9))
        assert updated.ids() == ["a", "z"]

    def test_set_leaves_original_untouched(self) -> None:
        graph = Graph([Value("a", 1)])
        graph.set(Value("a", 2))
        assert graph.get("a") == Value("a", 1)

    def test_remove(self) -> None:
        graph = Graph([Value("a", 1), Value("b", 2)])
        assert graph.remove("a").ids() == ["b"]
        assert graph.ids() == ["a", "b"]

    def test_remove_missing_returns_same_graph(self) -> None:
        graph = Graph([Value("a", 1)])
        assert graph.remove("zz") is graph

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(DuplicateIdError, match="'a'"):
            Graph([Value("a", 1), Expression("a")])

    def test_duplicate_id_error_hierarchy(self) -> None:
        assert issubclass(DuplicateIdError, GraphError)
        assert issubclass(GraphError, ValueError)

    def test_module_functions_mirror_methods(self) -> None:
        graph = Graph([Value("a", 1)])
        assert get(graph, "a") == Value("a", 1)
        assert contains(graph, "a")
        assert store_set(graph, Value("a", 3)).get("a") == Value("a", 3)


class TestGraphReads:
    def test_equality_is_ordered(self) -> None:
        first = Graph([Value("a"), Value("b")])
        assert first == Graph([Value("a"), Value("b")])
        assert first != Graph([Value("b"), Value("a")])

    def test_not_equal_to_other_types(self) -> None:
        assert Graph() != []

    def test_values_snapshot(self) -> None:
        graph = Graph([Value("a", 1, dependents=["e"]), Expression("e", 1, dependencies=["a"])])
        assert graph.values() == {"a": 1, "e": 1}

    def test_iteration_and_len(self) -> None:
        graph = Graph([Value("a"), Value("b")])
        assert len(graph) == 2
        assert [n.id for n in graph] == ["a", "b"]
        assert graph.nodes == (Value("a"), Value("b"))

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(Graph())
