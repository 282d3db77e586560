"""
Formula parsing and evaluation.

Grammar (a leading ``=`` is optional)::

    expr    := term (('+' | '-') term)*
    term    := unary (('*' | '/') unary)*
    unary   := '-' unary | primary
    primary := NUMBER | REF | FN '(' expr (',' expr)* ')' | '(' expr ')'

Formulas are parsed into an immutable tree that can be evaluated against
a value lookup, asked for the cells it references, shifted for copying
and rendered back to text.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterator, NoReturn

from gridsync.domain.spreadsheet.cell_ref import CellRef
from gridsync.domain.spreadsheet.errors import ErrorCode, SpreadsheetError

Lookup = Callable[[str], float]

FUNCTIONS: dict[str, Callable[..., float]] = {
    "max": max,
    "min": min,
}

_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<num>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<ref>\$?[a-zA-Z]\$?\d+)"
    r"|(?P<fn>[a-zA-Z_]+)"
    r"|(?P<op>[-+*/(),])"
    r")"
)

_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2}


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_number(value: float) -> float:
    """Collapse integral floats to int so they serialize as ``6``, not ``6.0``."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class Node:
    """Base class for formula tree nodes."""

    precedence = 3

    def evaluate(self, lookup: Lookup) -> float:
        raise NotImplementedError

    def refs(self) -> Iterator[CellRef]:
        return iter(())

    def shifted(self, d_col: int, d_row: int) -> "Node":
        return self

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Num(Node):
    value: float

    def evaluate(self, lookup: Lookup) -> float:
        return self.value

    def render(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class Ref(Node):
    ref: CellRef

    def evaluate(self, lookup: Lookup) -> float:
        return lookup(self.ref.cell_id)

    def refs(self) -> Iterator[CellRef]:
        yield self.ref

    def shifted(self, d_col: int, d_row: int) -> Node:
        return Ref(self.ref.shifted(d_col, d_row))

    def render(self) -> str:
        return self.ref.render()


@dataclass(frozen=True)
class Neg(Node):
    operand: Node

    def evaluate(self, lookup: Lookup) -> float:
        return -self.operand.evaluate(lookup)

    def refs(self) -> Iterator[CellRef]:
        return self.operand.refs()

    def shifted(self, d_col: int, d_row: int) -> Node:
        return Neg(self.operand.shifted(d_col, d_row))

    def render(self) -> str:
        inner = self.operand.render()
        if isinstance(self.operand, BinOp):
            inner = f"({inner})"
        return f"-{inner}"


@dataclass(frozen=True)
class BinOp(Node):
    op: str
    left: Node
    right: Node

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return _PRECEDENCE[self.op]

    def evaluate(self, lookup: Lookup) -> float:
        left = self.left.evaluate(lookup)
        right = self.right.evaluate(lookup)
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        if right == 0:
            raise SpreadsheetError.of(ErrorCode.BAD_REQ, "division by zero")
        return left / right

    def refs(self) -> Iterator[CellRef]:
        yield from self.left.refs()
        yield from self.right.refs()

    def shifted(self, d_col: int, d_row: int) -> Node:
        return BinOp(
            self.op, self.left.shifted(d_col, d_row), self.right.shifted(d_col, d_row)
        )

    def render(self) -> str:
        left = self.left.render()
        if self.left.precedence < self.precedence:
            left = f"({left})"
        right = self.right.render()
        # a - (b - c) and a / (b * c) need their parentheses
        if self.right.precedence < self.precedence or (
            self.right.precedence == self.precedence and self.op in "-/"
        ):
            right = f"({right})"
        return f"{left} {self.op} {right}"


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: tuple[Node, ...]

    def evaluate(self, lookup: Lookup) -> float:
        return FUNCTIONS[self.name](*(a.evaluate(lookup) for a in self.args))

    def refs(self) -> Iterator[CellRef]:
        for arg in self.args:
            yield from arg.refs()

    def shifted(self, d_col: int, d_row: int) -> Node:
        return Call(self.name, tuple(a.shifted(d_col, d_row) for a in self.args))

    def render(self) -> str:
        return f"{self.name}({', '.join(a.render() for a in self.args)})"


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if not match or match.end() == pos:
            raise SpreadsheetError.of(
                ErrorCode.BAD_REQ, f"unexpected input '{text[pos:].strip()}' in formula"
            )
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = _tokenize(text)
        self._pos = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise SpreadsheetError.of(ErrorCode.BAD_REQ, "empty formula")
        node = self._expr()
        if self._pos != len(self._tokens):
            self._fail()
        return node

    def _peek(self) -> tuple[str, str] | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            self._fail()
        self._pos += 1
        return token

    def _accept(self, op: str) -> bool:
        if self._peek() == ("op", op):
            self._pos += 1
            return True
        return False

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            self._fail()

    def _fail(self) -> NoReturn:
        token = self._peek()
        where = f"at '{token[1]}'" if token else "at end of input"
        raise SpreadsheetError.of(
            ErrorCode.BAD_REQ, f"syntax error {where} in formula '{self._text}'"
        )

    def _expr(self) -> Node:
        node = self._term()
        while self._peek() in (("op", "+"), ("op", "-")):
            op = self._next()[1]
            node = BinOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self._peek() in (("op", "*"), ("op", "/")):
            op = self._next()[1]
            node = BinOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._accept("-"):
            return Neg(self._unary())
        return self._primary()

    def _primary(self) -> Node:
        kind, value = self._next()
        if kind == "num":
            return Num(float(value))
        if kind == "ref":
            return Ref(CellRef.parse(value))
        if kind == "fn":
            name = value.lower()
            if name not in FUNCTIONS:
                raise SpreadsheetError.of(ErrorCode.BAD_REQ, f"unknown function '{value}'")
            self._expect("(")
            args = [self._expr()]
            while self._accept(","):
                args.append(self._expr())
            self._expect(")")
            return Call(name, tuple(args))
        if (kind, value) == ("op", "("):
            node = self._expr()
            self._expect(")")
            return node
        self._pos -= 1
        self._fail()


def parse_formula(text: str) -> Node:
    """Parse formula text into a tree.

    Raises:
        SpreadsheetError: BAD_REQ on any syntax error.
    """
    body = text.strip()
    if body.startswith("="):
        body = body[1:]
    return _Parser(body).parse()


def referenced_cells(node: Node) -> set[str]:
    return {ref.cell_id for ref in node.refs()}


def shift_formula(text: str, d_col: int, d_row: int) -> str:
    """Re-render a formula with its relative references moved by an offset."""
    node = parse_formula(text).shifted(d_col, d_row)
    prefix = "=" if text.strip().startswith("=") else ""
    return prefix + node.render()
