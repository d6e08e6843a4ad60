"""Semantic version parsing (SemVer 2.0.0) and announcement tag parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from distplan.core.result import Err, Ok, Result
from distplan.errors import InvalidPlan


_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@total_ordering
@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return len(self.pre) > 0

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            out += "-" + ".".join(self.pre)
        if self.build:
            out += "+" + ".".join(self.build)
        return out

    def to_tag(self) -> str:
        return f"v{self}"

    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def same_precedence(self, other: Version) -> bool:
        """Equal for ordering purposes: build metadata is ignored."""
        return self._key() == other._key() and self.pre == other.pre

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        if self._key() != other._key():
            return self._key() < other._key()
        # A release sorts after all of its prereleases; build metadata is ignored.
        if not self.pre or not other.pre:
            return bool(self.pre) and not other.pre
        return _pre_lt(self.pre, other.pre)


def _pre_lt(a: tuple[str, ...], b: tuple[str, ...]) -> bool:
    for x, y in zip(a, b):
        if x == y:
            continue
        x_num, y_num = x.isdigit(), y.isdigit()
        if x_num and y_num:
            return int(x) < int(y)
        if x_num != y_num:
            return x_num
        return x < y
    return len(a) < len(b)


def parse_version(text: str) -> Version | None:
    """Parse a SemVer string; a single leading `v` is tolerated."""
    s = text.strip()
    if s.startswith("v"):
        s = s[1:]
    m = _SEMVER_RE.match(s)
    if m is None:
        return None
    pre = tuple(m.group(4).split(".")) if m.group(4) else ()
    build = tuple(m.group(5).split(".")) if m.group(5) else ()
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)), pre, build)


@dataclass(frozen=True, slots=True)
class AnnouncementTag:
    """What a git tag announces: one app, or every app at one version."""

    tag: str
    version: Version
    app_name: str | None

    @property
    def prerelease(self) -> bool:
        return self.version.is_prerelease


def _strip_app_prefix(text: str, app_names: tuple[str, ...]) -> tuple[str, str] | None:
    best: tuple[str, str] | None = None
    for name in app_names:
        if not text.startswith(name):
            continue
        rest = text[len(name) :]
        if best is None or len(rest) < len(best[1]):
            best = (name, rest)
    return best


def parse_announcement_tag(tag: str, app_names: tuple[str, ...]) -> Result[AnnouncementTag, InvalidPlan]:
    """Parse a release tag.

    Accepted shapes: `v1.2.3`, `1.2.3`, `app-v1.2.3`, `app/v1.2.3` and
    `some/prefix/app/v1.2.3`. When several app names match, the longest one
    wins.
    """
    app_name: str | None = None
    suffix = tag

    if "/" in tag:
        prefix, suffix = tag.rsplit("/", 1)
        maybe_app = prefix.rsplit("/", 1)[-1]
        stripped = _strip_app_prefix(maybe_app, app_names)
        if stripped is not None and stripped[1] == "":
            app_name = stripped[0]

    if app_name is None:
        stripped = _strip_app_prefix(suffix, app_names)
        if stripped is not None and stripped[1].startswith("-"):
            app_name = stripped[0]
            suffix = stripped[1][1:]

    version = parse_version(suffix)
    if version is None:
        return Err(
            InvalidPlan(
                message=f"tag does not carry a semantic version: {tag!r}",
                field="announcement_tag",
                hint="Expected v1.2.3, app-v1.2.3 or app/v1.2.3",
            )
        )

    return Ok(AnnouncementTag(tag=tag, version=version, app_name=app_name))
