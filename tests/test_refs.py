"""Tests for cellgraph sum-formula parsing and A1 helpers."""

from __future__ import annotations

import pytest
from cellgraph import Expression, FormulaError, expand_range, expression, parse_formula
from cellgraph._refs import a1_to_rowcol, rowcol_to_a1


class TestCoordinates:
    @pytest.mark.parametrize(
        ("ref", "rowcol"),
        [("A1", (1, 1)), ("B3", (3, 2)), ("Z10", (10, 26)), ("AA1", (1, 27)), ("$C$4", (4, 3))],
    )
    def test_a1_to_rowcol(self, ref: str, rowcol: tuple[int, int]) -> None:
        assert a1_to_rowcol(ref) == rowcol

    def test_rowcol_to_a1(self) -> None:
        assert rowcol_to_a1(1, 1) == "A1"
        assert rowcol_to_a1(1, 27) == "AA1"
        assert rowcol_to_a1(7, 52) == "AZ7"

    def test_invalid_ref(self) -> None:
        with pytest.raises(FormulaError):
            a1_to_rowcol("1A")


class TestExpandRange:
    def test_column(self) -> None:
        assert expand_range("A1:A3") == ["A1", "A2", "A3"]

    def test_block_is_row_major(self) -> None:
        assert expand_range("A1:B2") == ["A1", "B1", "A2", "B2"]

    def test_reversed_corners(self) -> None:
        assert expand_range("B2:A1") == ["A1", "B1", "A2", "B2"]

    def test_invalid_range(self) -> None:
        with pytest.raises(FormulaError, match="Invalid range"):
            expand_range("A1")


class TestParseFormula:
    def test_plus_names(self) -> None:
        assert parse_formula("=a+b") == ["a", "b"]

    def test_leading_equals_optional(self) -> None:
        assert parse_formula("a + b") == ["a", "b"]

    def test_names_keep_case(self) -> None:
        assert parse_formula("=aPlusB+Total") == ["aPlusB", "Total"]

    def test_sum_of_range(self) -> None:
        assert parse_formula("=SUM(A1:A3)") == ["A1", "A2", "A3"]

    def test_sum_is_case_insensitive(self) -> None:
        assert parse_formula("=sum(x, y)") == ["x", "y"]

    def test_mixed_terms(self) -> None:
        assert parse_formula("=SUM(A1:A2, total) + (c + d)") == ["A1", "A2", "total", "c", "d"]

    def test_anchored_refs_normalized(self) -> None:
        assert parse_formula("=$a$1+B$2") == ["A1", "B2"]

    def test_cell_shaped_names_normalized(self) -> None:
        assert parse_formula("=a1+$a$1") == ["A1"]
        assert parse_formula("=b2+SUM(b1:b2)") == ["B2", "B1"]

    def test_no_duplicates(self) -> None:
        assert parse_formula("=A1+SUM(A1:A2)+A2") == ["A1", "A2"]

    def test_empty_sum(self) -> None:
        assert parse_formula("=SUM()") == []

    @pytest.mark.parametrize(
        "formula",
        ["=", "=a*b", "=AVERAGE(a)", "=a+", "=(a", "=a b", '="text"', "=1+a"],
    )
    def test_rejects_non_sums(self, formula: str) -> None:
        with pytest.raises(FormulaError):
            parse_formula(formula)


class TestExpressionHelper:
    def test_from_formula(self) -> None:
        assert expression("t", "=a+b") == Expression("t", dependencies=("a", "b"))

    def test_from_ids(self) -> None:
        assert expression("t", ["a", "b"]).dependencies == ("a", "b")
