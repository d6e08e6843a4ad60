from __future__ import annotations

import typer

from distplan import __version__
from distplan.cli.commands.announce import announce
from distplan.cli.commands.generate import generate
from distplan.cli.commands.plan_cmd import plan

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(generate)
app.command()(plan)
app.command()(announce)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Generate release CI workflows and Homebrew formulas from a release plan."""


def main() -> None:
    app()


if __name__ == "__main__":
    main()
