"""Typed configuration loading and access.

The `[dist]` table of `distplan.toml` drives which pipeline jobs exist and
what goes into the generated formulas.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, cast

from distplan.errors import ConfigError

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "DistConfig",
    "GlobalTask",
    "PrRunMode",
    "SignMode",
    "PublishJob",
    "CONFIG_FILE_NAME",
    "load_config",
    "load_config_or_default",
    "is_valid_job_name",
    "JOB_NAME_RULE",
]

CONFIG_FILE_NAME = "distplan.toml"

PrRunMode = Literal["skip", "upload", "plan"]
SignMode = Literal["off", "test", "prod"]
PublishJob = Literal["homebrew"]

PR_RUN_MODES: tuple[PrRunMode, ...] = ("skip", "upload", "plan")
SIGN_MODES: tuple[SignMode, ...] = ("off", "test", "prod")
PUBLISH_JOBS: tuple[PublishJob, ...] = ("homebrew",)

DEFAULT_INSTALL_COMMAND = "cargo install cargo-dist --locked"
DEFAULT_BUILD_COMMAND = "cargo dist build"
DEFAULT_PLAN_COMMAND = "cargo dist plan --output-format=json"
DEFAULT_CI_PATH = ".github/workflows/release.yml"
DEFAULT_FORMULA_DIR = "Formula"

_JOB_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")
JOB_NAME_RULE = "use letters, digits, `-` and `_`, starting with a letter or `_`"


@dataclass(frozen=True, slots=True)
class GlobalTask:
    """Runner + install + args for the single global-artifacts job."""

    runner: str
    install: str
    args: str


@dataclass(frozen=True, slots=True)
class DistConfig:
    """User configuration for one generation run.

    `None` means "not configured"; an explicit `False` or `()` means
    "configured off".
    """

    rust_version: str | None = None
    fail_fast: bool = False
    pr_run_mode: PrRunMode = "plan"
    global_task: GlobalTask | None = None
    ssldotcom_windows_sign: SignMode = "off"
    publish_jobs: tuple[PublishJob, ...] = ()
    tap: str | None = None
    user_publish_jobs: tuple[str, ...] = ()
    create_release: bool = True
    publish_prereleases: bool = False
    dependencies: tuple[str, ...] = ()
    license: str | None = None
    desc: str | None = None
    homepage: str | None = None
    install_command: str = DEFAULT_INSTALL_COMMAND
    build_command: str = DEFAULT_BUILD_COMMAND
    plan_command: str = DEFAULT_PLAN_COMMAND
    ci_path: str = DEFAULT_CI_PATH
    formula_dir: str = DEFAULT_FORMULA_DIR

    @property
    def wants_homebrew(self) -> bool:
        return "homebrew" in self.publish_jobs

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[DistConfig, str]:
        """Create a config from the `[dist]` table (parsed TOML)."""
        for key in ("user_publish_jobs", "publish_jobs", "dependencies"):
            if key in data and get_str_list(data, key) is None:
                return Err(f"{key} must be a list of strings")

        for key in ("fail_fast", "create_release", "publish_prereleases"):
            if key in data and get_bool(data, key) is None:
                return Err(f"{key} must be a boolean")

        pr_run_mode = get_str(data, "pr_run_mode") or "plan"
        if pr_run_mode not in PR_RUN_MODES:
            return Err(f"pr_run_mode must be one of {', '.join(PR_RUN_MODES)}: {pr_run_mode!r}")

        sign = get_str(data, "ssldotcom_windows_sign") or "off"
        if sign not in SIGN_MODES:
            return Err(f"ssldotcom_windows_sign must be one of {', '.join(SIGN_MODES)}: {sign!r}")

        publish_jobs: list[PublishJob] = []
        for job in _str_list(data, "publish_jobs"):
            if job not in PUBLISH_JOBS:
                return Err(f"unknown publish job: {job!r}")
            if job not in publish_jobs:
                publish_jobs.append(cast(PublishJob, job))

        user_jobs: list[str] = []
        for raw in _str_list(data, "user_publish_jobs"):
            # `./name` refers to `.github/workflows/name.yml` in the same repository.
            name = raw.removeprefix("./")
            if not is_valid_job_name(name):
                return Err(f"invalid user publish job {raw!r}: {JOB_NAME_RULE}")
            if name in user_jobs:
                return Err(f"duplicate user publish job: {name!r}")
            user_jobs.append(name)

        global_task: GlobalTask | None = None
        task_table = get_table(data, "global_task")
        if task_table is not None:
            runner = get_str(task_table, "runner")
            install = get_str(task_table, "install")
            if runner is None or install is None:
                return Err("global_task requires 'runner' and 'install'")
            global_task = GlobalTask(
                runner=runner,
                install=install,
                args=get_str(task_table, "args") or "--artifacts=global",
            )
        elif "global_task" in data:
            return Err("global_task must be a table")

        deps: list[str] = []
        for dep in _str_list(data, "dependencies"):
            if dep not in deps:
                deps.append(dep)

        return Ok(
            cls(
                rust_version=get_str(data, "rust_version"),
                fail_fast=get_bool(data, "fail_fast") or False,
                pr_run_mode=cast(PrRunMode, pr_run_mode),
                global_task=global_task,
                ssldotcom_windows_sign=cast(SignMode, sign),
                publish_jobs=tuple(publish_jobs),
                tap=get_str(data, "tap"),
                user_publish_jobs=tuple(user_jobs),
                create_release=_bool_or(data, "create_release", True),
                publish_prereleases=get_bool(data, "publish_prereleases") or False,
                dependencies=tuple(deps),
                license=get_str(data, "license"),
                desc=get_str(data, "desc"),
                homepage=get_str(data, "homepage"),
                install_command=get_str(data, "install_command") or DEFAULT_INSTALL_COMMAND,
                build_command=get_str(data, "build_command") or DEFAULT_BUILD_COMMAND,
                plan_command=get_str(data, "plan_command") or DEFAULT_PLAN_COMMAND,
                ci_path=get_str(data, "ci_path") or DEFAULT_CI_PATH,
                formula_dir=get_str(data, "formula_dir") or DEFAULT_FORMULA_DIR,
            )
        )


def _str_list(data: Mapping[str, object], key: str) -> list[str]:
    return get_str_list(data, key) or []


def _bool_or(data: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(data, key)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[DistConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to distplan.toml

    Returns:
        Ok(DistConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    table = get_table(result.value, "dist")
    if table is None:
        return Err(ConfigError("Missing [dist] table", path=path))

    parsed = DistConfig.from_dict(table)
    if isinstance(parsed, Err):
        return Err(ConfigError(f"Invalid config: {parsed.error}", path=path))
    return Ok(parsed.value)


def load_config_or_default(path: Path) -> Result[DistConfig, ConfigError]:
    """Load config from file, or return the default config if the file is absent.

    A file that exists but fails to parse is still an error.
    """
    if not path.exists():
        return Ok(DistConfig())
    return load_config(path)


def is_valid_job_name(name: str) -> bool:
    """Whether `name` works as a GitHub job id suffix and a workflow file stem."""
    return _JOB_NAME_RE.fullmatch(name) is not None
