"""Render context for the Homebrew formula of one app."""

from __future__ import annotations

import re
from dataclasses import dataclass

from distplan.context.collapse import Collapsed, collapse
from distplan.core.config import DistConfig
from distplan.core.result import Err, Ok, Result
from distplan.errors import DistError, InvalidPlan, MissingField
from distplan.plan.model import AppRelease, PlatformBuild, ReleasePlan
from distplan.plan.triples import ARM64_MACOS, X64_MACOS, homebrew_platform

# Homebrew installs these itself; everything else left over goes to pkgshare.
DOC_FILE_GLOBS: tuple[str, ...] = ("README.*", "readme.*", "LICENSE", "LICENSE.*", "CHANGELOG.*")

_WORD_SPLIT = re.compile(r"[-_.\s]+")


@dataclass(frozen=True, slots=True)
class FormulaSpec:
    """Platform key (`arm64`, `x86_64`) -> what that CPU downloads and installs.

    Platform order is branch order in the rendered formula.
    """

    builds: tuple[tuple[str, PlatformBuild], ...]

    def build(self, platform: str) -> PlatformBuild | None:
        for key, build in self.builds:
            if key == platform:
                return build
        return None

    @property
    def platforms(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.builds)


def formula_class_name(app_name: str) -> str:
    """`my-app` -> `MyApp`, `tool2_cli` -> `Tool2Cli`, `2fast` -> `App2fast`.

    Ruby constants start with a letter.
    """
    parts = [p for p in _WORD_SPLIT.split(app_name) if p]
    name = "".join(p[0].upper() + p[1:] for p in parts)
    if not name[:1].isalpha():
        name = "App" + name
    return name


def install_hint(app_name: str, tap: str | None) -> str:
    if tap:
        return f"brew install {tap.rstrip('/')}/{app_name}"
    return f"brew install {app_name}"


def has_macos_archive(release: AppRelease) -> bool:
    return bool(release.archives_for(ARM64_MACOS) or release.archives_for(X64_MACOS))


def formula_spec(release: AppRelease, download_url: str) -> FormulaSpec:
    """Collect the app's macOS archives per platform.

    An Intel-only release also serves Apple Silicon through Rosetta.
    """
    builds: dict[str, PlatformBuild] = {}
    for triple in (ARM64_MACOS, X64_MACOS):
        archives = release.archives_for(triple)
        platform = homebrew_platform(triple)
        if not archives or platform is None:
            continue
        archive = archives[0]
        key, cpu = platform
        builds[key] = PlatformBuild(
            cpu=cpu,
            id=f"{download_url}/{archive.file_name}",
            binaries=archive.binaries,
            sha256=archive.checksum,
        )

    if "x86_64" in builds and "arm64" not in builds:
        intel = builds["x86_64"]
        rosetta = PlatformBuild(cpu="arm", id=intel.id, binaries=intel.binaries, sha256=intel.sha256)
        return FormulaSpec(builds=(("arm64", rosetta), ("x86_64", intel)))
    return FormulaSpec(builds=tuple(builds.items()))


def _cpu_predicate(cpus: list[str]) -> str:
    return " || ".join(f"Hardware::CPU.type == :{cpu}" for cpu in cpus)


def _branch[T](collapsed: Collapsed[T], spec: FormulaSpec) -> dict[str, object]:
    """Template view of one collapsed field.

    Each arm carries the Ruby line that opens it: `if <cpu test>` for the
    first, `elsif <cpu test>` for the middle ones and `else` for the last.
    """
    arms: list[dict[str, object]] = []
    last = len(collapsed.arms) - 1
    for i, arm in enumerate(collapsed.arms):
        cpus = [b.cpu for p in arm.platforms if (b := spec.build(p)) is not None]
        predicate = _cpu_predicate(cpus)
        if i == 0:
            opener = f"if {predicate}"
        elif i == last:
            opener = "else"
        else:
            opener = f"elsif {predicate}"
        arms.append(
            {
                "platforms": list(arm.platforms),
                "predicate": predicate,
                "opener": opener,
                "value": arm.value,
            }
        )
    return {"unified": collapsed.unified, "value": collapsed.value, "arms": arms}


def branch_context(spec: FormulaSpec) -> dict[str, object]:
    """Collapse URL, checksum and binary list independently.

    A field only branches on CPU type when the platforms disagree on it.
    """
    if not spec.builds:
        raise ValueError("FormulaSpec has no platforms")
    url = collapse({k: b.id for k, b in spec.builds})
    sha256 = collapse({k: b.sha256 for k, b in spec.builds})
    binaries = collapse({k: list(b.binaries) for k, b in spec.builds})
    return {
        "url": _branch(url, spec),
        "sha256": _branch(sha256, spec),
        "binaries": _branch(binaries, spec),
    }


def build_formula_context(
    release: AppRelease, plan: ReleasePlan, config: DistConfig
) -> Result[dict[str, object], DistError]:
    """Flat render context for `installer/homebrew.rb.j2`."""
    if config.wants_homebrew and config.tap is None:
        return Err(
            MissingField(
                field="tap",
                where="publish_jobs contains 'homebrew'",
                hint='Set tap = "owner/homebrew-tap" in [dist]',
            )
        )
    if plan.artifact_download_url is None:
        return Err(
            MissingField(
                field="artifact_download_url",
                where="release plan",
                hint="Formula download URLs are built from artifact_download_url",
            )
        )

    spec = formula_spec(release, plan.artifact_download_url)
    if not spec.builds:
        return Err(
            InvalidPlan(
                message=f"{release.app_name} has no macOS archive to build a formula from",
                field="artifacts",
            )
        )

    context: dict[str, object] = {
        "formula_class": formula_class_name(release.app_name),
        "name": release.app_name,
        "version": str(release.app_version),
        "desc": release.desc or config.desc,
        "homepage": release.homepage or config.homepage,
        "license": release.license or config.license,
        "dependencies": list(config.dependencies),
        "doc_files": list(DOC_FILE_GLOBS),
        "install_hint": install_hint(release.app_name, config.tap),
    }
    context.update(branch_context(spec))
    return Ok(context)


def formula_path(config: DistConfig, app_name: str) -> str:
    """Repository-relative path of an app's formula."""
    return f"{config.formula_dir.rstrip('/')}/{app_name}.rb"
