from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from distplan.core.config import CONFIG_FILE_NAME, DistConfig, load_config, load_config_or_default
from distplan.core.errors import ErrorCode
from distplan.core.result import Err
from distplan.output.console import ConsoleProtocol, RichConsole
from distplan.output.errors import print_dist_error


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: DistConfig
    console: ConsoleProtocol


def build_context(*, root: Path, config_path: Path | None) -> CLIContext:
    """Resolve the repository root and load `[dist]` configuration.

    An explicit `--config` must exist; the implicit `distplan.toml` at the
    root is optional.
    """
    console = RichConsole()
    root = root.resolve()

    if config_path is not None:
        result = load_config(config_path)
    else:
        result = load_config_or_default(root / CONFIG_FILE_NAME)

    if isinstance(result, Err):
        print_dist_error(result.error, console)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(root=root, config=result.value, console=console)
