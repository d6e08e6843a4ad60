from __future__ import annotations

from pathlib import Path

import typer

from distplan.cli.commands._helpers import exit_on_error, load_plan
from distplan.cli.context import build_context
from distplan.core.files import atomic_write_text
from distplan.core.result import Err, Ok, Result
from distplan.errors import WriteFailed
from distplan.services.announce import render_release_notes


def announce(
    plan: Path | None = typer.Option(None, "--plan", help="Release plan manifest (JSON)"),
    config: Path | None = typer.Option(None, "--config", help="Path to distplan.toml"),
    root: Path = typer.Option(Path("."), "--root", help="Repository root"),
    out: Path | None = typer.Option(None, "--out", help="Write the notes to a file"),
) -> None:
    """Render the GitHub release notes for a release plan."""
    ctx = build_context(root=root, config_path=config)
    release_plan = load_plan(ctx, plan)
    notes = render_release_notes(release_plan, ctx.config)

    if out is None:
        ctx.console.raw(notes)
        return

    exit_on_error(_write(out, notes), ctx)
    ctx.console.success(f"wrote {out}")


def _write(path: Path, text: str) -> Result[None, WriteFailed]:
    try:
        atomic_write_text(path, text)
    except OSError as e:
        return Err(WriteFailed(message=f"failed to write {path}: {e}", path=path))
    return Ok(None)
