from __future__ import annotations

from pathlib import Path

import typer

from distplan.cli.commands._helpers import exit_on_error, exit_with_code, load_plan
from distplan.cli.context import build_context
from distplan.core.errors import ErrorCode
from distplan.output.console import Style
from distplan.services.generate import check_outputs, render_outputs, write_outputs


def generate(
    plan: Path | None = typer.Option(None, "--plan", help="Release plan manifest (JSON)"),
    config: Path | None = typer.Option(None, "--config", help="Path to distplan.toml"),
    root: Path = typer.Option(Path("."), "--root", help="Repository root"),
    check: bool = typer.Option(False, "--check", help="Fail if generated files are out of date"),
) -> None:
    """Render the release workflow and Homebrew formulas."""
    ctx = build_context(root=root, config_path=config)
    release_plan = load_plan(ctx, plan)

    files = exit_on_error(render_outputs(release_plan, ctx.config, ctx.console), ctx)

    if check:
        stale = check_outputs(ctx.root, files)
        if stale:
            for path in stale:
                ctx.console.error(f"{path} is out of date")
            ctx.console.print("hint: run `distplan generate` and commit the result", Style.DIM)
            exit_with_code(int(ErrorCode.OUTDATED))
        ctx.console.success(f"{len(files)} generated file(s) up to date")
        return

    written = exit_on_error(write_outputs(ctx.root, files), ctx)
    for path in written:
        ctx.console.success(f"wrote {path.relative_to(ctx.root).as_posix()}")
