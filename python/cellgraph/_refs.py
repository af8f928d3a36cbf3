"""Sum-formula parsing: turn ``=SUM(A1:A3)+total`` into dependency ids."""

from __future__ import annotations

import re
from typing import Iterable

from cellgraph._errors import FormulaError
from cellgraph._nodes import Expression, Id

# ---------------------------------------------------------------------------
# A1 coordinates
# ---------------------------------------------------------------------------

_A1_RE = re.compile(r"^\$?([A-Z]{1,3})\$?(\d+)$", re.IGNORECASE)


def a1_to_rowcol(ref: str) -> tuple[int, int]:
    """``"B3"`` -> ``(3, 2)`` (1-based row and column)."""
    m = _A1_RE.match(ref.strip())
    if not m:
        raise FormulaError(f"Invalid cell reference: {ref!r}")
    col = 0
    for ch in m.group(1).upper():
        col = col * 26 + (ord(ch) - ord("A") + 1)
    row = int(m.group(2))
    if row < 1:
        raise FormulaError(f"Invalid cell reference: {ref!r}")
    return row, col


def rowcol_to_a1(row: int, col: int) -> str:
    """``(3, 2)`` -> ``"B3"``."""
    if row < 1 or col < 1:
        raise FormulaError(f"Invalid coordinates: ({row}, {col})")
    letters = ""
    while col:
        col, rem = divmod(col - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return f"{letters}{row}"


def expand_range(range_ref: str) -> list[str]:
    """Expand a range like ``"A1:B2"`` into ``["A1", "B1", "A2", "B2"]``.

    Rows are walked top to bottom, columns left to right.
    """
    parts = range_ref.split(":")
    if len(parts) != 2:
        raise FormulaError(f"Invalid range: {range_ref!r}")

    start_row, start_col = a1_to_rowcol(parts[0])
    end_row, end_col = a1_to_rowcol(parts[1])

    # Normalize order
    r_min, r_max = min(start_row, end_row), max(start_row, end_row)
    c_min, c_max = min(start_col, end_col), max(start_col, end_col)

    return [
        rowcol_to_a1(r, c)
        for r in range(r_min, r_max + 1)
        for c in range(c_min, c_max + 1)
    ]


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_CELL = r"\$?[A-Z]{1,3}\$?\d+"
_TOKEN_RE = re.compile(
    rf"\s*(?:(?P<range>{_CELL}\s*:\s*{_CELL})"
    r"|(?P<anchored>\$[A-Z]{1,3}\$?\d+|[A-Z]{1,3}\$\d+)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_.]*)"
    r"|(?P<op>[+,()]))",
    re.IGNORECASE,
)


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    length = len(text)
    while pos < length:
        if text[pos:].strip() == "":
            break
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise FormulaError(f"Unexpected input at position {pos}: {text[pos:]!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


# ---------------------------------------------------------------------------
# Recursive descent
# ---------------------------------------------------------------------------


class _Parser:
    """sum := term ('+' term)* ; term := SUM(sum, ...) | (sum) | range | name"""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0

    def _peek(self) -> tuple[str, str] | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _expect(self, op: str) -> None:
        token = self._peek()
        if token != ("op", op):
            found = token[1] if token else "end of formula"
            raise FormulaError(f"Expected {op!r} but found {found!r} in {self._text!r}")
        self._pos += 1

    def parse(self) -> list[Id]:
        refs = self._sum()
        token = self._peek()
        if token is not None:
            raise FormulaError(f"Unexpected {token[1]!r} in {self._text!r}")
        return refs

    def _sum(self) -> list[Id]:
        refs = self._term()
        while self._peek() == ("op", "+"):
            self._pos += 1
            refs.extend(self._term())
        return refs

    def _term(self) -> list[Id]:
        token = self._peek()
        if token is None:
            raise FormulaError(f"Formula ends early: {self._text!r}")
        kind, text = token
        self._pos += 1

        if kind == "range":
            return expand_range(text.replace(" ", ""))
        if kind == "anchored":
            return [text.replace("$", "").upper()]
        if kind == "name":
            if self._peek() == ("op", "("):
                if text.upper() != "SUM":
                    raise FormulaError(f"Unsupported function {text.upper()} in {self._text!r}")
                return self._call()
            if _A1_RE.match(text):
                # Cell-shaped names share one spelling with ranges and $-refs
                return [text.upper()]
            return [text]
        if text == "(":
            refs = self._sum()
            self._expect(")")
            return refs
        raise FormulaError(f"Unexpected {text!r} in {self._text!r}")

    def _call(self) -> list[Id]:
        self._expect("(")
        refs: list[Id] = []
        if self._peek() == ("op", ")"):
            self._pos += 1
            return refs
        refs.extend(self._sum())
        while self._peek() == ("op", ","):
            self._pos += 1
            refs.extend(self._sum())
        self._expect(")")
        return refs


def parse_formula(formula: str) -> list[Id]:
    """Extract the ids a sum formula reads, deduplicated, in first-seen order.

    Accepts an optional leading ``=``.  Raises FormulaError for anything that
    is not a sum of names, A1 references and ranges.
    """
    body = formula.strip()
    if body.startswith("="):
        body = body[1:]
    if not body.strip():
        raise FormulaError("Empty formula")
    return list(dict.fromkeys(_Parser(body).parse()))


def expression(node_id: Id, formula: str | Iterable[Id]) -> Expression:
    """Build an Expression from a formula string or an iterable of ids."""
    if isinstance(formula, str):
        return Expression(node_id, dependencies=parse_formula(formula))
    return Expression(node_id, dependencies=tuple(formula))
