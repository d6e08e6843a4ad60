"""Error presentation and exit code mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from distplan.core.errors import ErrorCode
from distplan.errors import (
    ConfigError,
    DistError,
    InvalidPlan,
    MalformedTemplate,
    MissingField,
    UndefinedVariable,
    WriteFailed,
)
from distplan.output.console import Style

if TYPE_CHECKING:
    from distplan.output.console import ConsoleProtocol

__all__ = ["print_dist_error", "dist_error_exit_code"]


def print_dist_error(error: DistError, console: ConsoleProtocol) -> None:
    match error:
        case InvalidPlan(message=message, field=field, hint=hint):
            console.error(f"invalid release plan: {message}")
            if field:
                console.print(f"field: {field}", Style.DIM)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case MissingField(hint=hint):
            console.error(error.message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case UndefinedVariable() | MalformedTemplate():
            console.error(error.message)
            if error.hint:
                console.print(f"hint: {error.hint}", Style.DIM)
        case ConfigError(message=message, path=path):
            console.error(message)
            if path is not None:
                console.print(f"config: {path}", Style.DIM)
        case WriteFailed(message=message):
            console.error(message)


def dist_error_exit_code(error: DistError) -> int:
    match error:
        case InvalidPlan():
            return int(ErrorCode.USER_ERROR)
        case ConfigError() | MissingField():
            return int(ErrorCode.CONFIG_ERROR)
        case UndefinedVariable() | MalformedTemplate():
            return int(ErrorCode.TEMPLATE_ERROR)
        case WriteFailed():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.USER_ERROR)
