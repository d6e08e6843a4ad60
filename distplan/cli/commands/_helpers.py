"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from distplan.core.result import Err, Result
from distplan.errors import DistError
from distplan.output.errors import dist_error_exit_code, print_dist_error
from distplan.plan.model import ReleasePlan
from distplan.plan.plan_file import read_plan_file

if TYPE_CHECKING:
    from distplan.cli.context import CLIContext

DEFAULT_PLAN_FILE = "dist-plan.json"


def exit_on_error[T](result: Result[T, DistError], ctx: CLIContext) -> T:
    """Return the value of an Ok result; print the error and exit otherwise.

    The exit code follows the error type (see `dist_error_exit_code`).
    """
    if isinstance(result, Err):
        print_dist_error(result.error, ctx.console)
        raise typer.Exit(code=dist_error_exit_code(result.error))
    return result.value


def load_plan(ctx: CLIContext, plan_path: Path | None) -> ReleasePlan:
    path = plan_path if plan_path is not None else ctx.root / DEFAULT_PLAN_FILE
    return exit_on_error(read_plan_file(path=path), ctx)


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
