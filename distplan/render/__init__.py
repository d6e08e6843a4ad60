"""Conditional rendering engine (a Jinja-compatible subset)."""

from __future__ import annotations

from .escape import Dialect, Safe
from .loader import CI_GITHUB_TEMPLATE, HOMEBREW_TEMPLATE, load_template
from .runtime import truthy
from .template import Template, compile_template, render_string

__all__ = [
    "CI_GITHUB_TEMPLATE",
    "Dialect",
    "HOMEBREW_TEMPLATE",
    "Safe",
    "Template",
    "compile_template",
    "load_template",
    "render_string",
    "truthy",
]
