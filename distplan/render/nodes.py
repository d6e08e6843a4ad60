"""Template AST.

The node set is closed: a template is a sequence of `Text`, `Output`, `If`
and `For` nodes, and expressions are built from the `Expr` variants below.
"""

from __future__ import annotations

from dataclasses import dataclass


# -----------------------------------------------------------------------------
# Expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Const:
    value: object


@dataclass(frozen=True, slots=True)
class Name:
    name: str


@dataclass(frozen=True, slots=True)
class Attr:
    obj: Expr
    name: str


@dataclass(frozen=True, slots=True)
class Item:
    obj: Expr
    key: Expr


@dataclass(frozen=True, slots=True)
class ListLit:
    items: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class Not:
    operand: Expr


@dataclass(frozen=True, slots=True)
class And:
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Or:
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Compare:
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Filter:
    expr: Expr
    name: str
    args: tuple[Expr, ...]


@dataclass(frozen=True, slots=True)
class CondExpr:
    test: Expr
    then: Expr
    otherwise: Expr


Expr = Const | Name | Attr | Item | ListLit | Not | And | Or | Compare | Filter | CondExpr


# -----------------------------------------------------------------------------
# Statements
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class Output:
    expr: Expr
    line: int


@dataclass(frozen=True, slots=True)
class If:
    # (test, body) pairs: the `if` arm followed by each `elif` arm.
    branches: tuple[tuple[Expr, tuple[Node, ...]], ...]
    otherwise: tuple[Node, ...]
    line: int


@dataclass(frozen=True, slots=True)
class For:
    targets: tuple[str, ...]
    iterable: Expr
    body: tuple[Node, ...]
    otherwise: tuple[Node, ...]
    line: int


Node = Text | Output | If | For
