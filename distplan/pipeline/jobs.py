from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from distplan.core.result import Err, Ok, Result
from distplan.errors import InvalidPlan

JobKind = Literal["plan", "build-local", "build-global", "sign", "gate", "publish"]

PLAN_JOB = "plan"
LOCAL_JOB = "upload-local-artifacts"
GLOBAL_JOB = "upload-global-artifacts"
SIGN_JOB = "sign-windows-artifacts"
GATE_JOB = "should-publish"
HOMEBREW_JOB = "publish-homebrew-formula"
RELEASE_JOB = "publish-release"

# GitHub expressions over the plan job outputs.
PUSHED_TAG = "needs.plan.outputs.publishing == 'true'"
NOT_PRERELEASE = "!fromJson(needs.plan.outputs.val).announcement_is_prerelease"


@dataclass(frozen=True, slots=True)
class MatrixEntry:
    """One `upload-local-artifacts` run: a runner building some targets."""

    runner: str
    install: str
    args: str
    targets: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PipelineJob:
    id: str
    kind: JobKind
    needs: tuple[str, ...] = ()
    # GitHub expression (without `${{ }}`) gating the job; None runs always.
    condition: str | None = None
    matrix: tuple[MatrixEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class HomebrewTap:
    tap: str

    @property
    def job_id(self) -> str:
        return HOMEBREW_JOB


@dataclass(frozen=True, slots=True)
class CustomJob:
    name: str

    @property
    def job_id(self) -> str:
        return f"custom-{self.name}"


@dataclass(frozen=True, slots=True)
class GithubRelease:
    create: bool

    @property
    def job_id(self) -> str:
        return RELEASE_JOB


PublishTarget = HomebrewTap | CustomJob | GithubRelease


def publish_gate(is_prerelease: bool, publish_prereleases: bool) -> bool:
    """Whether publish jobs run for an announcement."""
    return not is_prerelease or publish_prereleases


def publish_condition(publish_prereleases: bool) -> str:
    """`publish_gate` as a GitHub expression over the plan job outputs."""
    if publish_prereleases:
        return PUSHED_TAG
    return f"{PUSHED_TAG} && {NOT_PRERELEASE}"


@dataclass(frozen=True, slots=True)
class JobGraph:
    jobs: tuple[PipelineJob, ...]
    publish_targets: tuple[PublishTarget, ...] = field(default=())

    def job(self, job_id: str) -> PipelineJob | None:
        for j in self.jobs:
            if j.id == job_id:
                return j
        return None

    def ids(self) -> tuple[str, ...]:
        return tuple(j.id for j in self.jobs)

    def topological_order(self) -> Result[tuple[str, ...], InvalidPlan]:
        """Kahn's algorithm; ties keep declaration order."""
        ids = self.ids()
        if len(set(ids)) != len(ids):
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            return Err(InvalidPlan(message=f"duplicate job ids: {', '.join(dupes)}", field="jobs"))

        known = set(ids)
        remaining: dict[str, set[str]] = {}
        for j in self.jobs:
            unknown = [n for n in j.needs if n not in known]
            if unknown:
                return Err(
                    InvalidPlan(
                        message=f"job {j.id} needs unknown job(s): {', '.join(unknown)}",
                        field="jobs",
                    )
                )
            remaining[j.id] = set(j.needs)

        order: list[str] = []
        while remaining:
            ready = [i for i in ids if i in remaining and not remaining[i]]
            if not ready:
                cycle = ", ".join(i for i in ids if i in remaining)
                return Err(InvalidPlan(message=f"job graph has a cycle among: {cycle}", field="jobs"))
            for i in ready:
                del remaining[i]
                order.append(i)
            for deps in remaining.values():
                deps.difference_update(ready)
        return Ok(tuple(order))
