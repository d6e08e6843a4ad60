"""Error payloads shared by plan validation, context building and rendering.

All of them are fatal for the operation that produced them: a partially
rendered pipeline document is never returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InvalidPlan:
    """The release description is malformed or incomplete."""

    message: str
    field: str | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class MissingField:
    """A required configuration or context key is absent and has no default."""

    field: str
    where: str
    hint: str | None = None

    @property
    def message(self) -> str:
        return f"missing required field '{self.field}' ({self.where})"


@dataclass(frozen=True, slots=True)
class UndefinedVariable:
    name: str
    template: str
    line: int | None = None

    @property
    def message(self) -> str:
        loc = f"{self.template}:{self.line}" if self.line is not None else self.template
        return f"undefined variable '{self.name}' in {loc}"

    @property
    def hint(self) -> str | None:
        return "add the key to the render context or use the `default` filter"


@dataclass(frozen=True, slots=True)
class MalformedTemplate:
    detail: str
    template: str
    line: int | None = None

    @property
    def message(self) -> str:
        loc = f"{self.template}:{self.line}" if self.line is not None else self.template
        return f"malformed template {loc}: {self.detail}"

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config file cannot be read or has an invalid structure."""

    message: str
    path: Path | None = None

    @property
    def hint(self) -> str | None:
        return str(self.path) if self.path is not None else None


@dataclass(frozen=True, slots=True)
class WriteFailed:
    """A generated document could not be written."""

    message: str
    path: Path

    @property
    def hint(self) -> str | None:
        return str(self.path)


RenderError = UndefinedVariable | MalformedTemplate

DistError = (
    InvalidPlan | MissingField | UndefinedVariable | MalformedTemplate | ConfigError | WriteFailed
)
