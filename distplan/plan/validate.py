from __future__ import annotations

from collections.abc import Sequence

from distplan.core.result import Err, Ok, Result
from distplan.errors import InvalidPlan
from distplan.plan.model import ARTIFACT_KINDS, AppRelease, Artifact, ReleasePlan
from distplan.plan.semver import parse_announcement_tag, parse_version


def app_release(
    *,
    app_name: str,
    app_version: str,
    artifacts: Sequence[Artifact],
    targets: Sequence[str] | None = None,
    announcement_title: str | None = None,
    announcement_body: str = "",
    desc: str | None = None,
    homepage: str | None = None,
    license: str | None = None,
) -> Result[AppRelease, InvalidPlan]:
    """Build one AppRelease, parsing its version.

    `targets` defaults to every target the artifacts cover, in first-seen
    order.
    """
    if not app_name.strip():
        return Err(InvalidPlan(message="app_name must be non-empty", field="app_name"))

    version = parse_version(app_version)
    if version is None:
        return Err(
            InvalidPlan(
                message=f"invalid semantic version for {app_name}: {app_version!r}",
                field="app_version",
                hint="Expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]",
            )
        )

    if targets is None:
        seen: list[str] = []
        for a in artifacts:
            for t in a.target_triples:
                if t not in seen:
                    seen.append(t)
        targets = seen

    return Ok(
        AppRelease(
            app_name=app_name,
            app_version=version,
            announcement_title=announcement_title or f"v{version}",
            announcement_body=announcement_body,
            artifacts=tuple(artifacts),
            targets=tuple(targets),
            desc=desc,
            homepage=homepage,
            license=license,
        )
    )


def _check_release(release: AppRelease) -> InvalidPlan | None:
    for artifact in release.artifacts:
        if not artifact.path.strip():
            return InvalidPlan(
                message=f"{release.app_name}: artifact path must be non-empty",
                field="artifacts.path",
            )
        if artifact.kind not in ARTIFACT_KINDS:
            return InvalidPlan(
                message=f"{release.app_name}: unknown artifact kind {artifact.kind!r}",
                field="artifacts.kind",
                hint=f"Expected one of: {', '.join(ARTIFACT_KINDS)}",
            )
        if artifact.checksum is not None and not artifact.checksum.strip():
            return InvalidPlan(
                message=f"{release.app_name}: empty checksum for {artifact.path}",
                field="artifacts.checksum",
            )

    covered = {t for a in release.artifacts for t in a.target_triples}
    missing = [t for t in release.targets if t not in covered]
    if missing:
        return InvalidPlan(
            message=f"{release.app_name}: no artifacts for target(s) {', '.join(missing)}",
            field="artifacts",
            hint="Every target an app ships for needs at least one artifact.",
        )
    return None


def build_release_plan(
    releases: Sequence[AppRelease],
    *,
    announcement_tag: str | None = None,
    artifact_download_url: str | None = None,
) -> Result[ReleasePlan, InvalidPlan]:
    """Validate releases and freeze them into a ReleasePlan."""
    if not releases:
        return Err(
            InvalidPlan(
                message="release plan has no releases",
                field="releases",
                hint="Nothing to release: add at least one app.",
            )
        )

    keys: set[tuple[str, str]] = set()
    for release in releases:
        key = (release.app_name, str(release.app_version))
        if key in keys:
            return Err(
                InvalidPlan(
                    message=f"duplicate release: {key[0]} {key[1]}",
                    field="releases",
                )
            )
        keys.add(key)

        problem = _check_release(release)
        if problem is not None:
            return Err(problem)

    if announcement_tag is not None:
        names = tuple(r.app_name for r in releases)
        parsed = parse_announcement_tag(announcement_tag, names)
        if isinstance(parsed, Err):
            return parsed
        tag = parsed.value
        announced = [r for r in releases if tag.app_name in (None, r.app_name)]
        for r in announced:
            if not r.app_version.same_precedence(tag.version):
                return Err(
                    InvalidPlan(
                        message=(
                            f"tag {announcement_tag} announces {tag.version} "
                            f"but {r.app_name} is {r.app_version}"
                        ),
                        field="announcement_tag",
                        hint="The tag version must match the released app version.",
                    )
                )

    url = artifact_download_url.rstrip("/") if artifact_download_url else None
    return Ok(
        ReleasePlan(
            releases=tuple(releases),
            announcement_tag=announcement_tag,
            artifact_download_url=url,
        )
    )
