"""Output-format escaping for interpolated values."""

from __future__ import annotations

import shlex
from collections.abc import Callable
from typing import Literal

Dialect = Literal["shell", "ruby", "none"]


class Safe(str):
    """A string that is already escaped for the output format."""

    __slots__ = ()


def shell_quote(value: str) -> str:
    return shlex.quote(value)


def ruby_escape(value: str) -> str:
    """Escape text for the inside of a double-quoted Ruby string literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{")


def _identity(value: str) -> str:
    return value


ESCAPERS: dict[Dialect, Callable[[str], str]] = {
    "shell": shell_quote,
    "ruby": ruby_escape,
    "none": _identity,
}


def dialect_for(template_name: str) -> Dialect:
    """Pick the escaping dialect from a template file name."""
    stem = template_name.removesuffix(".j2")
    if stem.endswith((".yml", ".yaml", ".sh")):
        return "shell"
    if stem.endswith(".rb"):
        return "ruby"
    return "none"
