"""Generation services used by the CLI."""

from __future__ import annotations

from .announce import render_release_notes
from .generate import (
    RenderedFile,
    check_ci_document,
    check_outputs,
    render_ci,
    render_formula,
    render_outputs,
    write_outputs,
)

__all__ = [
    "RenderedFile",
    "check_ci_document",
    "check_outputs",
    "render_ci",
    "render_formula",
    "render_outputs",
    "render_release_notes",
    "write_outputs",
]
