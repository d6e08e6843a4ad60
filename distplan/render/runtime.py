"""Evaluate a parsed template against a render context.

Truthiness is strict and explicit:

- `bool` values are used as is,
- `None` (an absent optional value) is false,
- sequences and mappings are false when empty,
- every other present value is true (including `0` and `""`).

A name missing from the context is an error, never an implicit false.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from distplan.render.escape import ESCAPERS, Dialect, Safe, ruby_escape, shell_quote
from distplan.render.nodes import (
    And,
    Attr,
    CondExpr,
    Compare,
    Const,
    Expr,
    Filter,
    For,
    If,
    Item,
    ListLit,
    Name,
    Node,
    Not,
    Or,
    Output,
    Text,
)


class UndefinedError(Exception):
    def __init__(self, name: str, line: int | None) -> None:
        super().__init__(name)
        self.name = name
        self.line = line


class RenderFailure(Exception):
    """A template defect discovered while rendering (bad filter, bad operand)."""

    def __init__(self, detail: str, line: int | None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.line = line


@dataclass(frozen=True, slots=True)
class LoopInfo:
    index0: int
    length: int

    @property
    def index(self) -> int:
        return self.index0 + 1

    @property
    def first(self) -> bool:
        return self.index0 == 0

    @property
    def last(self) -> bool:
        return self.index0 == self.length - 1

    @property
    def revindex(self) -> int:
        return self.length - self.index0


_MISSING = object()


def truthy(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (str, bytes)):
        return True
    if isinstance(value, (Sequence, Mapping, set, frozenset)):
        return len(value) > 0
    return True


def _lookup_attr(obj: object, name: str) -> object:
    if isinstance(obj, Mapping):
        return obj.get(name, _MISSING)
    if name.startswith("_"):
        return _MISSING
    value = getattr(obj, name, _MISSING)
    if callable(value):
        return _MISSING
    return value


def _stringify(value: object, line: int) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    raise RenderFailure(
        f"cannot interpolate a {type(value).__name__}; use a for loop or the join filter",
        line,
    )


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------


def _f_join(value: object, line: int, sep: object = "") -> str:
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise RenderFailure("join expects a sequence", line)
    return str(sep).join(_stringify(v, line) for v in value)


def _f_length(value: object, line: int) -> int:
    if isinstance(value, (Sequence, Mapping, set, frozenset)):
        return len(value)
    raise RenderFailure("length expects a sequence or mapping", line)


def _f_safe(value: object, line: int) -> Safe:
    return Safe(_stringify(value, line))


def _f_shell(value: object, line: int) -> Safe:
    return Safe(shell_quote(_stringify(value, line)))


def _f_ruby(value: object, line: int) -> Safe:
    return Safe(ruby_escape(_stringify(value, line)))


def _f_json(value: object, line: int) -> Safe:
    try:
        return Safe(json.dumps(value))
    except TypeError as e:
        raise RenderFailure(f"json filter: {e}", line) from e


def _f_lower(value: object, line: int) -> str:
    return _stringify(value, line).lower()


def _f_upper(value: object, line: int) -> str:
    return _stringify(value, line).upper()


def _f_first(value: object, line: int) -> object:
    if isinstance(value, Sequence) and len(value) > 0:
        return value[0]
    raise RenderFailure("first expects a non-empty sequence", line)


def _f_last(value: object, line: int) -> object:
    if isinstance(value, Sequence) and len(value) > 0:
        return value[-1]
    raise RenderFailure("last expects a non-empty sequence", line)


FILTERS: dict[str, Callable[..., object]] = {
    "join": _f_join,
    "length": _f_length,
    "safe": _f_safe,
    "shell": _f_shell,
    "ruby": _f_ruby,
    "json": _f_json,
    "lower": _f_lower,
    "upper": _f_upper,
    "first": _f_first,
    "last": _f_last,
}


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------


class _Frame:
    """Variable scopes, innermost last."""

    def __init__(self, context: Mapping[str, object]) -> None:
        self._scopes: list[Mapping[str, object]] = [context]

    def push(self, scope: Mapping[str, object]) -> None:
        self._scopes.append(scope)

    def pop(self) -> None:
        self._scopes.pop()

    def get(self, name: str) -> object:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return _MISSING


def _dotted(expr: Expr) -> str:
    match expr:
        case Name(name=name):
            return name
        case Attr(obj=obj, name=name):
            return f"{_dotted(obj)}.{name}"
        case Item(obj=obj, key=Const(value=key)):
            return f"{_dotted(obj)}[{key!r}]"
    return "<expr>"


class Evaluator:
    def __init__(self, context: Mapping[str, object], *, dialect: Dialect) -> None:
        self._frame = _Frame(context)
        self._escape = ESCAPERS[dialect]

    def eval(self, expr: Expr, line: int) -> object:
        match expr:
            case Const(value=value):
                return value
            case Name(name=name):
                value = self._frame.get(name)
                if value is _MISSING:
                    raise UndefinedError(name, line)
                return value
            case Attr(obj=obj, name=name):
                value = _lookup_attr(self.eval(obj, line), name)
                if value is _MISSING:
                    raise UndefinedError(_dotted(expr), line)
                return value
            case Item(obj=obj, key=key):
                container = self.eval(obj, line)
                k = self.eval(key, line)
                try:
                    return container[k]  # type: ignore[index]
                except (KeyError, IndexError, TypeError):
                    raise UndefinedError(_dotted(expr), line) from None
            case ListLit(items=items):
                return [self.eval(i, line) for i in items]
            case Not(operand=operand):
                return not truthy(self.eval(operand, line))
            case And(left=left, right=right):
                return truthy(self.eval(left, line)) and truthy(self.eval(right, line))
            case Or(left=left, right=right):
                return truthy(self.eval(left, line)) or truthy(self.eval(right, line))
            case Compare(op=op, left=left, right=right):
                return self._compare(op, self.eval(left, line), self.eval(right, line), line)
            case CondExpr(test=test, then=then, otherwise=otherwise):
                if truthy(self.eval(test, line)):
                    return self.eval(then, line)
                return self.eval(otherwise, line)
            case Filter(expr=inner, name="default", args=args):
                try:
                    value = self.eval(inner, line)
                except UndefinedError:
                    value = None
                if value is None:
                    return self.eval(args[0], line) if args else ""
                return value
            case Filter(expr=inner, name=name, args=args):
                fn = FILTERS.get(name)
                if fn is None:
                    raise RenderFailure(f"unknown filter '{name}'", line)
                value = self.eval(inner, line)
                evaluated = [self.eval(a, line) for a in args]
                try:
                    return fn(value, line, *evaluated)
                except TypeError as e:
                    raise RenderFailure(f"bad arguments to filter '{name}': {e}", line) from e
        raise RenderFailure(f"unsupported expression {expr!r}", line)

    @staticmethod
    def _compare(op: str, left: object, right: object, line: int) -> bool:
        try:
            match op:
                case "==":
                    return left == right
                case "!=":
                    return left != right
                case "<":
                    return left < right  # type: ignore[operator]
                case "<=":
                    return left <= right  # type: ignore[operator]
                case ">":
                    return left > right  # type: ignore[operator]
                case ">=":
                    return left >= right  # type: ignore[operator]
                case "in":
                    return left in right  # type: ignore[operator]
                case "not in":
                    return left not in right  # type: ignore[operator]
        except TypeError as e:
            raise RenderFailure(f"cannot compare with '{op}': {e}", line) from e
        raise RenderFailure(f"unknown operator '{op}'", line)

    def emit(self, nodes: tuple[Node, ...], out: list[str]) -> None:
        for node in nodes:
            match node:
                case Text(text=text):
                    out.append(text)
                case Output(expr=expr, line=line):
                    value = self.eval(expr, line)
                    if isinstance(value, Safe):
                        out.append(str(value))
                    else:
                        out.append(self._escape(_stringify(value, line)))
                case If(branches=branches, otherwise=otherwise, line=line):
                    for test, body in branches:
                        if truthy(self.eval(test, line)):
                            self.emit(body, out)
                            break
                    else:
                        self.emit(otherwise, out)
                case For():
                    self._emit_for(node, out)

    def _emit_for(self, node: For, out: list[str]) -> None:
        iterable = self.eval(node.iterable, node.line)
        if isinstance(iterable, Mapping):
            items: list[object] = list(iterable.items())
        elif isinstance(iterable, (str, bytes)) or not isinstance(iterable, Sequence):
            raise RenderFailure(
                f"for loop over a non-sequence ({type(iterable).__name__})", node.line
            )
        else:
            items = list(iterable)

        if not items:
            self.emit(node.otherwise, out)
            return

        for i, item in enumerate(items):
            scope: dict[str, object] = {"loop": LoopInfo(index0=i, length=len(items))}
            if len(node.targets) == 1:
                scope[node.targets[0]] = item
            else:
                if not isinstance(item, Sequence) or len(item) != len(node.targets):
                    raise RenderFailure(
                        f"cannot unpack loop item into {', '.join(node.targets)}", node.line
                    )
                for name, value in zip(node.targets, item):
                    scope[name] = value
            self._frame.push(scope)
            try:
                self.emit(node.body, out)
            finally:
                self._frame.pop()
