"""Template context builders: plan + configuration -> render-ready mappings."""

from __future__ import annotations

from .ci import build_ci_context
from .collapse import Arm, Collapsed, collapse
from .formula import (
    FormulaSpec,
    branch_context,
    build_formula_context,
    formula_class_name,
    formula_path,
    formula_spec,
    has_macos_archive,
    install_hint,
)

__all__ = [
    "Arm",
    "Collapsed",
    "FormulaSpec",
    "branch_context",
    "build_ci_context",
    "build_formula_context",
    "collapse",
    "formula_class_name",
    "formula_path",
    "formula_spec",
    "has_macos_archive",
    "install_hint",
]
