"""Packaged templates (CI workflow, Homebrew formula)."""
