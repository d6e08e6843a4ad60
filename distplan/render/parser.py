from __future__ import annotations

from distplan.render.expr import parse_expression, parse_loop_header
from distplan.render.lexer import TemplateSyntaxError, Token
from distplan.render.nodes import Expr, For, If, Node, Output, Text


def _split_tag(body: str) -> tuple[str, str]:
    parts = body.split(None, 1)
    keyword = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    return keyword, rest


class _BlockParser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> tuple[Node, ...]:
        nodes, stop = self._body(stop_at=frozenset())
        if stop is not None:
            keyword, _, line = stop
            raise TemplateSyntaxError(f"unexpected '{{% {keyword} %}}'", line)
        return nodes

    def _body(
        self, *, stop_at: frozenset[str]
    ) -> tuple[tuple[Node, ...], tuple[str, str, int] | None]:
        """Parse nodes until one of `stop_at` (or end of input).

        Returns the nodes and the stopping tag as (keyword, rest, line).
        """
        nodes: list[Node] = []
        while self._pos < len(self._tokens):
            tok = self._tokens[self._pos]
            self._pos += 1

            if tok.kind == "text":
                nodes.append(Text(tok.value))
                continue
            if tok.kind == "output":
                nodes.append(Output(parse_expression(tok.value, tok.line), tok.line))
                continue

            keyword, rest = _split_tag(tok.value)
            if keyword in stop_at:
                return tuple(nodes), (keyword, rest, tok.line)
            if keyword == "if":
                nodes.append(self._if(rest, tok.line))
            elif keyword == "for":
                nodes.append(self._for(rest, tok.line))
            elif keyword in ("elif", "else", "endif", "endfor", "endraw"):
                raise TemplateSyntaxError(f"unexpected '{{% {keyword} %}}'", tok.line)
            else:
                raise TemplateSyntaxError(f"unknown block tag '{keyword}'", tok.line)

        return tuple(nodes), None

    def _if(self, test_src: str, line: int) -> If:
        if not test_src:
            raise TemplateSyntaxError("if requires a condition", line)
        branches: list[tuple[Expr, tuple[Node, ...]]] = []
        otherwise: tuple[Node, ...] = ()
        test = parse_expression(test_src, line)

        while True:
            body, stop = self._body(stop_at=frozenset({"elif", "else", "endif"}))
            if stop is None:
                raise TemplateSyntaxError("unclosed '{% if %}' (missing endif)", line)
            branches.append((test, body))
            keyword, rest, stop_line = stop
            if keyword == "elif":
                if not rest:
                    raise TemplateSyntaxError("elif requires a condition", stop_line)
                test = parse_expression(rest, stop_line)
                continue
            if keyword == "else":
                otherwise, stop = self._body(stop_at=frozenset({"endif"}))
                if stop is None:
                    raise TemplateSyntaxError("unclosed '{% if %}' (missing endif)", line)
            return If(branches=tuple(branches), otherwise=otherwise, line=line)

    def _for(self, header: str, line: int) -> For:
        targets, iterable = parse_loop_header(header, line)
        body, stop = self._body(stop_at=frozenset({"else", "endfor"}))
        if stop is None:
            raise TemplateSyntaxError("unclosed '{% for %}' (missing endfor)", line)
        otherwise: tuple[Node, ...] = ()
        if stop[0] == "else":
            otherwise, stop = self._body(stop_at=frozenset({"endfor"}))
            if stop is None:
                raise TemplateSyntaxError("unclosed '{% for %}' (missing endfor)", line)
        return For(targets=targets, iterable=iterable, body=body, otherwise=otherwise, line=line)


def parse_tokens(tokens: list[Token]) -> tuple[Node, ...]:
    return _BlockParser(tokens).parse()
