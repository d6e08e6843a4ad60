"""Split template source into text, output and block tokens.

Whitespace control is resolved here so the parser and the emitter never see
it:

- `{%-` / `{{-` / `{#-` strip all whitespace before the tag,
- `-%}` / `-}}` / `-#}` strip all whitespace after the tag,
- trim_blocks drops the first newline after a block or comment tag,
- lstrip_blocks drops spaces and tabs between the start of a line and a block
  or comment tag.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

TokenKind = Literal["text", "output", "block"]


class TemplateSyntaxError(Exception):
    def __init__(self, detail: str, line: int | None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.line = line


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    value: str
    line: int


_OPEN_RE = re.compile(r"\{\{|\{%|\{#")
_CLOSERS = {"{{": "}}", "{%": "%}", "{#": "#}"}
_ENDRAW_RE = re.compile(r"\{%(-?)\s*endraw\s*(-?)%\}")


def _line_at(source: str, pos: int) -> int:
    return source.count("\n", 0, pos) + 1


def _lstrip_line(source: str, seg_start: int, tag_pos: int) -> int:
    """Return where pending text should end if the tag starts its own line."""
    line_begin = source.rfind("\n", 0, tag_pos) + 1
    if line_begin < seg_start:
        return tag_pos
    if source[line_begin:tag_pos].strip(" \t"):
        return tag_pos
    return line_begin


def _skip_newline(source: str, pos: int) -> int:
    if source.startswith("\r\n", pos):
        return pos + 2
    if source.startswith("\n", pos):
        return pos + 1
    return pos


def _skip_whitespace(source: str, pos: int) -> int:
    while pos < len(source) and source[pos] in " \t\r\n":
        pos += 1
    return pos


def tokenize(source: str, *, trim_blocks: bool = True, lstrip_blocks: bool = True) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    seg_start = 0

    def emit_text(text: str, at: int) -> None:
        if text:
            tokens.append(Token("text", text, _line_at(source, at)))

    while True:
        m = _OPEN_RE.search(source, pos)
        if m is None:
            emit_text(source[seg_start:], seg_start)
            return tokens

        opener = m.group(0)
        tag_pos = m.start()
        inner_start = m.end()
        strip_before = source.startswith("-", inner_start)
        if strip_before:
            inner_start += 1

        closer = _CLOSERS[opener]
        close_pos = source.find(closer, inner_start)
        if close_pos < 0:
            raise TemplateSyntaxError(f"unterminated '{opener}' tag", _line_at(source, tag_pos))

        inner_end = close_pos
        strip_after = inner_end > inner_start and source[inner_end - 1] == "-"
        if strip_after:
            inner_end -= 1
        after = close_pos + len(closer)

        is_block = opener != "{{"
        text_end = tag_pos
        if strip_before:
            text_end = len(source[seg_start:tag_pos].rstrip())
            text_end += seg_start
        elif is_block and lstrip_blocks:
            text_end = _lstrip_line(source, seg_start, tag_pos)
        emit_text(source[seg_start:text_end], seg_start)

        line = _line_at(source, tag_pos)
        inner = source[inner_start:inner_end].strip()

        if opener == "{{":
            if not inner:
                raise TemplateSyntaxError("empty output tag", line)
            tokens.append(Token("output", inner, line))
        elif opener == "{%":
            if not inner:
                raise TemplateSyntaxError("empty block tag", line)
            if inner == "raw":
                after = _read_raw(
                    source,
                    after,
                    tokens,
                    line=line,
                    strip_after=strip_after,
                    trim_blocks=trim_blocks,
                    lstrip_blocks=lstrip_blocks,
                )
                pos = seg_start = after
                continue
            tokens.append(Token("block", inner, line))

        if strip_after:
            after = _skip_whitespace(source, after)
        elif is_block and trim_blocks:
            after = _skip_newline(source, after)
        pos = seg_start = after


def _read_raw(
    source: str,
    start: int,
    tokens: list[Token],
    *,
    line: int,
    strip_after: bool,
    trim_blocks: bool,
    lstrip_blocks: bool,
) -> int:
    """Emit raw text up to `{% endraw %}` and return the position after it."""
    if strip_after:
        start = _skip_whitespace(source, start)
    elif trim_blocks:
        start = _skip_newline(source, start)

    m = _ENDRAW_RE.search(source, start)
    if m is None:
        raise TemplateSyntaxError("unterminated raw block", line)

    end = m.start()
    if m.group(1):
        end = start + len(source[start:end].rstrip())
    elif lstrip_blocks:
        end = max(start, _lstrip_line(source, start, end))

    if end > start:
        tokens.append(Token("text", source[start:end], _line_at(source, start)))

    after = m.end()
    if m.group(2):
        return _skip_whitespace(source, after)
    if trim_blocks:
        return _skip_newline(source, after)
    return after
