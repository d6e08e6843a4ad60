from __future__ import annotations

import json
from pathlib import Path
from typing import cast

from distplan.core.files import atomic_write_text
from distplan.core.result import Err, Ok, Result
from distplan.core.structured import (
    as_obj_list,
    as_str_dict,
    get_int,
    get_list,
    get_raw_str,
    get_str,
    get_str_list,
)
from distplan.errors import InvalidPlan
from distplan.plan.model import ARTIFACT_KINDS, AppRelease, Artifact, ArtifactKind, ReleasePlan
from distplan.plan.validate import app_release, build_release_plan

PLAN_SCHEMA = 1


def plan_to_obj(plan: ReleasePlan) -> dict[str, object]:
    releases: list[dict[str, object]] = []
    for r in plan.releases:
        releases.append(
            {
                "app_name": r.app_name,
                "app_version": str(r.app_version),
                "announcement_title": r.announcement_title,
                "announcement_body": r.announcement_body,
                "is_prerelease": r.is_prerelease,
                "targets": list(r.targets),
                "desc": r.desc,
                "homepage": r.homepage,
                "license": r.license,
                "artifacts": [
                    {
                        "path": a.path,
                        "target_triples": list(a.target_triples),
                        "kind": a.kind,
                        "binaries": list(a.binaries),
                        "checksum": a.checksum,
                    }
                    for a in r.artifacts
                ],
            }
        )

    return {
        "schema": PLAN_SCHEMA,
        "announcement_tag": plan.announcement_tag,
        "announcement_is_prerelease": plan.announcement_is_prerelease,
        "artifact_download_url": plan.artifact_download_url,
        "releases": releases,
    }


def write_plan_file(*, path: Path, plan: ReleasePlan) -> Result[None, InvalidPlan]:
    try:
        atomic_write_text(path, json.dumps(plan_to_obj(plan), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(
            InvalidPlan(
                message=f"failed to write plan file: {e}",
                hint=str(path),
            )
        )
    return Ok(None)


def _parse_artifact(obj: object, *, app: str, index: int) -> Result[Artifact, InvalidPlan]:
    where = f"releases[{app}].artifacts[{index}]"
    d = as_str_dict(obj)
    if d is None:
        return Err(InvalidPlan(message=f"{where} must be an object", field=where))

    path = get_raw_str(d, "path")
    if path is None or not path.strip():
        return Err(InvalidPlan(message=f"{where}: artifact path is empty", field=f"{where}.path"))

    kind = get_str(d, "kind")
    if kind not in ARTIFACT_KINDS:
        return Err(
            InvalidPlan(
                message=f"{where}: invalid artifact kind {kind!r}",
                field=f"{where}.kind",
                hint=f"Expected one of: {', '.join(ARTIFACT_KINDS)}",
            )
        )

    if "target_triples" in d:
        triples = get_str_list(d, "target_triples")
        if triples is None:
            return Err(
                InvalidPlan(
                    message=f"{where}: target_triples must be a list of strings",
                    field=f"{where}.target_triples",
                )
            )
    elif "target_triple" in d:
        # Single-target shorthand.
        single = get_str(d, "target_triple")
        if single is None:
            return Err(
                InvalidPlan(
                    message=f"{where}: target_triple must be a non-empty string",
                    field=f"{where}.target_triple",
                )
            )
        triples = [single]
    else:
        triples = []

    binaries = get_str_list(d, "binaries") if "binaries" in d else []
    if binaries is None:
        return Err(
            InvalidPlan(
                message=f"{where}: binaries must be a list of strings",
                field=f"{where}.binaries",
            )
        )
    checksum = d.get("checksum")
    if checksum is not None and not isinstance(checksum, str):
        return Err(InvalidPlan(message=f"{where}: checksum must be a string", field=f"{where}.checksum"))

    return Ok(
        Artifact(
            path=path,
            target_triples=tuple(triples),
            kind=cast(ArtifactKind, kind),
            checksum=checksum,
            binaries=tuple(binaries),
        )
    )


def _parse_release(obj: object, *, index: int) -> Result[AppRelease, InvalidPlan]:
    d = as_str_dict(obj)
    if d is None:
        return Err(InvalidPlan(message=f"releases[{index}] must be an object", field="releases"))

    app_name = get_str(d, "app_name")
    if app_name is None:
        return Err(InvalidPlan(message=f"releases[{index}]: missing app_name", field="app_name"))

    app_version = get_str(d, "app_version")
    if app_version is None:
        return Err(
            InvalidPlan(message=f"{app_name}: missing app_version", field="app_version")
        )

    raw_artifacts = get_list(d, "artifacts")
    if raw_artifacts is None:
        return Err(InvalidPlan(message=f"{app_name}: missing artifacts[]", field="artifacts"))

    artifacts: list[Artifact] = []
    for i, item in enumerate(raw_artifacts):
        parsed = _parse_artifact(item, app=app_name, index=i)
        if isinstance(parsed, Err):
            return parsed
        artifacts.append(parsed.value)

    targets = get_str_list(d, "targets") if "targets" in d else None
    if "targets" in d and targets is None:
        return Err(InvalidPlan(message=f"{app_name}: targets must be a list of strings", field="targets"))

    return app_release(
        app_name=app_name,
        app_version=app_version,
        artifacts=artifacts,
        targets=targets,
        announcement_title=get_str(d, "announcement_title"),
        announcement_body=get_raw_str(d, "announcement_body") or "",
        desc=get_str(d, "desc"),
        homepage=get_str(d, "homepage"),
        license=get_str(d, "license"),
    )


def plan_from_obj(obj: object) -> Result[ReleasePlan, InvalidPlan]:
    data = as_str_dict(obj)
    if data is None:
        return Err(InvalidPlan(message="plan root must be a JSON object"))

    schema = get_int(data, "schema")
    if schema != PLAN_SCHEMA:
        return Err(
            InvalidPlan(
                message=f"unsupported plan schema: {schema}",
                field="schema",
                hint=f"Expected schema {PLAN_SCHEMA}",
            )
        )

    raw_releases = as_obj_list(data.get("releases"))
    if raw_releases is None:
        return Err(InvalidPlan(message="missing releases[] in plan", field="releases"))

    releases: list[AppRelease] = []
    for i, item in enumerate(raw_releases):
        parsed = _parse_release(item, index=i)
        if isinstance(parsed, Err):
            return parsed
        releases.append(parsed.value)

    return build_release_plan(
        releases,
        announcement_tag=get_str(data, "announcement_tag"),
        artifact_download_url=get_str(data, "artifact_download_url"),
    )


def read_plan_file(*, path: Path) -> Result[ReleasePlan, InvalidPlan]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            InvalidPlan(
                message=f"failed to read plan file: {e}",
                hint=str(path),
            )
        )

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(
            InvalidPlan(
                message=f"invalid JSON in plan file: {e}",
                hint=str(path),
            )
        )

    return plan_from_obj(obj)
