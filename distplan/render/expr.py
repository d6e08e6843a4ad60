"""Expression tokenizer and recursive-descent parser.

Precedence, loosest first: inline `a if b else c`, `or`, `and`, `not`,
comparisons (`==`, `!=`, `<`, `<=`, `>`, `>=`, `in`, `not in`), filters
(`|`), attribute/item access.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, NoReturn

from distplan.render.lexer import TemplateSyntaxError
from distplan.render.nodes import (
    And,
    Attr,
    CondExpr,
    Compare,
    Const,
    Expr,
    Filter,
    Item,
    ListLit,
    Name,
    Not,
    Or,
)

_TokKind = Literal["name", "string", "int", "op", "end"]

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<int>\d+)
    | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    | (?P<op>==|!=|<=|>=|[<>()\[\],.|])
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", "'": "'", '"': '"'}
_CONSTANTS: dict[str, object] = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "none": None,
    "None": None,
}
_KEYWORDS = frozenset({"and", "or", "not", "in", "if", "else"})
_COMPARE_OPS = frozenset({"==", "!=", "<", "<=", ">", ">="})


@dataclass(frozen=True, slots=True)
class _Tok:
    kind: _TokKind
    value: str


def _unquote(literal: str) -> str:
    body = literal[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _lex(source: str, line: int) -> list[_Tok]:
    toks: list[_Tok] = []
    pos = 0
    while pos < len(source):
        m = _TOKEN_RE.match(source, pos)
        if m is None:
            raise TemplateSyntaxError(f"unexpected character {source[pos]!r} in expression", line)
        pos = m.end()
        kind = m.lastgroup
        if kind == "ws" or kind is None:
            continue
        if kind == "string":
            toks.append(_Tok("string", _unquote(m.group(0))))
        elif kind == "name":
            toks.append(_Tok("name", m.group(0)))
        elif kind == "int":
            toks.append(_Tok("int", m.group(0)))
        else:
            toks.append(_Tok("op", m.group(0)))
    toks.append(_Tok("end", ""))
    return toks


class _Parser:
    def __init__(self, source: str, line: int) -> None:
        self._source = source
        self._line = line
        self._toks = _lex(source, line)
        self._pos = 0

    # -- token helpers -------------------------------------------------------

    def _peek(self, offset: int = 0) -> _Tok:
        return self._toks[min(self._pos + offset, len(self._toks) - 1)]

    def _next(self) -> _Tok:
        tok = self._peek()
        self._pos += 1
        return tok

    def _at_keyword(self, word: str, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok.kind == "name" and tok.value == word

    def _at_op(self, op: str) -> bool:
        tok = self._peek()
        return tok.kind == "op" and tok.value == op

    def _expect_op(self, op: str) -> None:
        if not self._at_op(op):
            self._fail(f"expected '{op}'")
        self._pos += 1

    def _expect_name(self) -> str:
        tok = self._next()
        if tok.kind != "name" or tok.value in _KEYWORDS:
            self._fail("expected a name")
        return tok.value

    def _fail(self, detail: str) -> NoReturn:
        raise TemplateSyntaxError(f"{detail} in expression {self._source!r}", self._line)

    # -- grammar -------------------------------------------------------------

    def parse(self) -> Expr:
        expr = self.expression()
        if self._peek().kind != "end":
            self._fail(f"unexpected token {self._peek().value!r}")
        return expr

    def at_end(self) -> bool:
        return self._peek().kind == "end"

    def expression(self) -> Expr:
        expr = self._or()
        if self._at_keyword("if"):
            self._next()
            test = self._or()
            if not self._at_keyword("else"):
                self._fail("inline if requires an else")
            self._next()
            otherwise = self.expression()
            return CondExpr(test=test, then=expr, otherwise=otherwise)
        return expr

    def _or(self) -> Expr:
        left = self._and()
        while self._at_keyword("or"):
            self._next()
            left = Or(left, self._and())
        return left

    def _and(self) -> Expr:
        left = self._not()
        while self._at_keyword("and"):
            self._next()
            left = And(left, self._not())
        return left

    def _not(self) -> Expr:
        if self._at_keyword("not"):
            self._next()
            return Not(self._not())
        return self._compare()

    def _compare(self) -> Expr:
        left = self._filtered()
        tok = self._peek()
        if tok.kind == "op" and tok.value in _COMPARE_OPS:
            self._next()
            return Compare(tok.value, left, self._filtered())
        if self._at_keyword("in"):
            self._next()
            return Compare("in", left, self._filtered())
        if self._at_keyword("not") and self._at_keyword("in", 1):
            self._pos += 2
            return Compare("not in", left, self._filtered())
        return left

    def _filtered(self) -> Expr:
        expr = self._postfix()
        while self._at_op("|"):
            self._next()
            name = self._expect_name()
            args: list[Expr] = []
            if self._at_op("("):
                self._next()
                if not self._at_op(")"):
                    args.append(self.expression())
                    while self._at_op(","):
                        self._next()
                        args.append(self.expression())
                self._expect_op(")")
            expr = Filter(expr, name, tuple(args))
        return expr

    def _postfix(self) -> Expr:
        expr = self._primary()
        while True:
            if self._at_op("."):
                self._next()
                tok = self._next()
                if tok.kind == "name":
                    expr = Attr(expr, tok.value)
                elif tok.kind == "int":
                    expr = Item(expr, Const(int(tok.value)))
                else:
                    self._fail("expected an attribute name")
            elif self._at_op("["):
                self._next()
                key = self.expression()
                self._expect_op("]")
                expr = Item(expr, key)
            else:
                return expr

    def _primary(self) -> Expr:
        tok = self._next()
        if tok.kind == "string":
            return Const(tok.value)
        if tok.kind == "int":
            return Const(int(tok.value))
        if tok.kind == "name":
            if tok.value in _CONSTANTS:
                return Const(_CONSTANTS[tok.value])
            if tok.value in _KEYWORDS:
                self._fail(f"unexpected keyword {tok.value!r}")
            return Name(tok.value)
        if tok.kind == "op" and tok.value == "(":
            inner = self.expression()
            self._expect_op(")")
            return inner
        if tok.kind == "op" and tok.value == "[":
            items: list[Expr] = []
            if not self._at_op("]"):
                items.append(self.expression())
                while self._at_op(","):
                    self._next()
                    items.append(self.expression())
            self._expect_op("]")
            return ListLit(tuple(items))
        self._fail("unexpected end of expression" if tok.kind == "end" else f"unexpected {tok.value!r}")

    # -- for-loop header -----------------------------------------------------

    def loop_header(self) -> tuple[tuple[str, ...], Expr]:
        targets = [self._expect_name()]
        while self._at_op(","):
            self._next()
            targets.append(self._expect_name())
        if not self._at_keyword("in"):
            self._fail("expected 'in'")
        self._next()
        iterable = self._filtered()
        if not self.at_end():
            self._fail(f"unexpected token {self._peek().value!r}")
        return tuple(targets), iterable


def parse_expression(source: str, line: int) -> Expr:
    return _Parser(source, line).parse()


def parse_loop_header(source: str, line: int) -> tuple[tuple[str, ...], Expr]:
    """Parse `name[, name] in expr` from a for tag."""
    return _Parser(source, line).loop_header()
