from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from distplan.plan.semver import Version


ArtifactKind = Literal["archive", "installer", "checksum", "symbols"]
ARTIFACT_KINDS: tuple[ArtifactKind, ...] = ("archive", "installer", "checksum", "symbols")


@dataclass(frozen=True, slots=True)
class Artifact:
    """A file produced by the build collaborator."""

    path: str
    target_triples: tuple[str, ...]
    kind: ArtifactKind
    checksum: str | None = None
    # Archive contents in install order.
    binaries: tuple[str, ...] = ()

    @property
    def target_triple(self) -> str | None:
        return self.target_triples[0] if self.target_triples else None

    @property
    def file_name(self) -> str:
        return self.path.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class AppRelease:
    app_name: str
    app_version: Version
    announcement_title: str
    announcement_body: str
    artifacts: tuple[Artifact, ...]
    targets: tuple[str, ...]
    desc: str | None = None
    homepage: str | None = None
    license: str | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.app_version.is_prerelease

    @property
    def id(self) -> str:
        return f"{self.app_name}-v{self.app_version}"

    def archives_for(self, target: str) -> tuple[Artifact, ...]:
        return tuple(
            a for a in self.artifacts if a.kind == "archive" and target in a.target_triples
        )

    def artifacts_of(self, kind: ArtifactKind) -> tuple[Artifact, ...]:
        return tuple(a for a in self.artifacts if a.kind == kind)


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Validated, read-only description of one release.

    Build instances through `distplan.plan.validate.build_release_plan` or
    `distplan.plan.plan_file.read_plan_file`; both enforce the invariants.
    """

    releases: tuple[AppRelease, ...]
    announcement_tag: str | None = None
    artifact_download_url: str | None = None

    @property
    def announcement_is_prerelease(self) -> bool:
        return any(r.is_prerelease for r in self.releases)

    @property
    def app_names(self) -> tuple[str, ...]:
        return tuple(r.app_name for r in self.releases)

    def release(self, app_name: str) -> AppRelease | None:
        for r in self.releases:
            if r.app_name == app_name:
                return r
        return None

    def targets(self) -> tuple[str, ...]:
        """Every target triple shipped by any app, sorted."""
        out: set[str] = set()
        for r in self.releases:
            out.update(r.targets)
        return tuple(sorted(out))


@dataclass(frozen=True, slots=True)
class PlatformBuild:
    """What one CPU architecture downloads and installs."""

    cpu: str
    id: str
    binaries: tuple[str, ...]
    sha256: str | None = None
