"""GitHub release body for an announcement."""

from __future__ import annotations

from distplan.context.formula import has_macos_archive, install_hint
from distplan.core.config import DistConfig
from distplan.plan.model import AppRelease, Artifact, ReleasePlan
from distplan.plan.triples import display_name

LISTED_KINDS = ("archive", "installer")


def _platforms(artifact: Artifact) -> str:
    names = [display_name(t) or t for t in artifact.target_triples]
    return ", ".join(names) if names else "any"


def _download_url(plan: ReleasePlan, artifact: Artifact) -> str | None:
    if plan.artifact_download_url is None:
        return None
    return f"{plan.artifact_download_url}/{artifact.file_name}"


def _release_section(release: AppRelease, plan: ReleasePlan, config: DistConfig) -> list[str]:
    lines: list[str] = []
    lines.append(f"## {release.announcement_title}")
    lines.append("")

    if release.announcement_body.strip():
        lines.append("### Release Notes")
        lines.append("")
        lines.append(release.announcement_body.rstrip())
        lines.append("")

    if config.wants_homebrew and has_macos_archive(release):
        lines.append(f"### Install {release.app_name} {release.app_version}")
        lines.append("")
        lines.append("#### Install prebuilt binaries via Homebrew")
        lines.append("")
        lines.append("```sh")
        lines.append(install_hint(release.app_name, config.tap))
        lines.append("```")
        lines.append("")

    listed = [a for a in release.artifacts if a.kind in LISTED_KINDS]
    if listed:
        lines.append(f"### Download {release.app_name} {release.app_version}")
        lines.append("")
        lines.append("| File | Platform | Checksum |")
        lines.append("|------|----------|----------|")
        for a in listed:
            url = _download_url(plan, a)
            file_cell = f"[{a.file_name}]({url})" if url else a.file_name
            lines.append(f"| {file_cell} | {_platforms(a)} | {a.checksum or '-'} |")
        lines.append("")
    return lines


def render_release_notes(plan: ReleasePlan, config: DistConfig) -> str:
    lines: list[str] = []
    if plan.announcement_tag is not None:
        lines.append(f"# {plan.announcement_tag}")
        lines.append("")
    if plan.announcement_is_prerelease:
        lines.append("> This is a prerelease.")
        lines.append("")
    for release in plan.releases:
        lines.extend(_release_section(release, plan, config))
    return "\n".join(lines).rstrip() + "\n"
