from __future__ import annotations

from pathlib import Path

from distplan.core.files import atomic_write_text, read_text_or_none


def test_atomic_write_creates_parents(tmp_path: Path) -> None:
    path = tmp_path / "a" / "b" / "out.txt"
    atomic_write_text(path, "hello\n")
    assert path.read_text(encoding="utf-8") == "hello\n"
    assert [p.name for p in path.parent.iterdir()] == ["out.txt"]


def test_atomic_write_replaces(tmp_path: Path) -> None:
    path = tmp_path / "out.txt"
    atomic_write_text(path, "one")
    atomic_write_text(path, "two")
    assert path.read_text(encoding="utf-8") == "two"


def test_read_text_or_none(tmp_path: Path) -> None:
    assert read_text_or_none(tmp_path / "missing.txt") is None
    path = tmp_path / "present.txt"
    path.write_text("x", encoding="utf-8")
    assert read_text_or_none(path) == "x"
