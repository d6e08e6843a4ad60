"""Render context for the GitHub Actions release workflow."""

from __future__ import annotations

from distplan.context.formula import formula_path, has_macos_archive
from distplan.core.config import DistConfig
from distplan.core.result import Err, Ok, Result
from distplan.errors import DistError, MissingField
from distplan.pipeline.jobs import (
    GATE_JOB,
    GLOBAL_JOB,
    HOMEBREW_JOB,
    LOCAL_JOB,
    PLAN_JOB,
    RELEASE_JOB,
    SIGN_JOB,
    CustomJob,
    HomebrewTap,
    JobGraph,
    PipelineJob,
)
from distplan.plan.model import ReleasePlan

PLAN_RUNNER = "ubuntu-20.04"


def _job_view(job: PipelineJob) -> dict[str, object]:
    return {
        "id": job.id,
        "needs": list(job.needs),
        "if_expr": f"${{{{ {job.condition} }}}}" if job.condition else None,
    }


def _optional(graph: JobGraph, job_id: str) -> dict[str, object] | None:
    job = graph.job(job_id)
    return _job_view(job) if job is not None else None


def _required(graph: JobGraph, job_id: str) -> Result[dict[str, object], MissingField]:
    job = graph.job(job_id)
    if job is None:
        return Err(MissingField(field=job_id, where="job graph"))
    return Ok(_job_view(job))


def build_ci_context(
    plan: ReleasePlan, config: DistConfig, graph: JobGraph
) -> Result[dict[str, object], DistError]:
    """Flat render context for `ci/github_ci.yml.j2`.

    Every job in `graph` maps to one context entry; jobs absent from the graph
    are `None` (or an empty list for custom jobs).
    """
    plan_job = _required(graph, PLAN_JOB)
    if isinstance(plan_job, Err):
        return plan_job
    gate = _required(graph, GATE_JOB)
    if isinstance(gate, Err):
        return gate
    release_job = _required(graph, RELEASE_JOB)
    if isinstance(release_job, Err):
        return release_job

    local: dict[str, object] | None = None
    local_job = graph.job(LOCAL_JOB)
    if local_job is not None:
        local = _job_view(local_job)
        local["matrix"] = [
            {
                "runner": entry.runner,
                "install": entry.install,
                "dist_args": entry.args,
                "targets": " ".join(entry.targets),
            }
            for entry in local_job.matrix
        ]

    global_job = _optional(graph, GLOBAL_JOB)
    if global_job is not None and config.global_task is not None:
        global_job["runner"] = config.global_task.runner
        global_job["install"] = config.global_task.install
        global_job["dist_args"] = config.global_task.args

    sign = _optional(graph, SIGN_JOB)
    if sign is not None:
        sign["environment"] = "PROD" if config.ssldotcom_windows_sign == "prod" else "TEST"

    release_job.value["create"] = config.create_release

    homebrew: dict[str, object] | None = None
    custom_jobs: list[dict[str, object]] = []
    for target in graph.publish_targets:
        match target:
            case HomebrewTap(tap=tap):
                homebrew = _optional(graph, HOMEBREW_JOB)
                if homebrew is not None:
                    homebrew["tap"] = tap
                    homebrew["formulas"] = [
                        formula_path(config, r.app_name)
                        for r in plan.releases
                        if has_macos_archive(r)
                    ]
            case CustomJob(name=name):
                view = _optional(graph, target.job_id)
                if view is not None:
                    view["name"] = name
                    custom_jobs.append(view)

    return Ok(
        {
            "pull_request": config.pr_run_mode != "skip",
            "pr_run_mode": config.pr_run_mode,
            "fail_fast": config.fail_fast,
            "rust_version": config.rust_version,
            "install_command": config.install_command,
            "build_command": config.build_command,
            "plan_command": config.plan_command,
            "plan_runner": PLAN_RUNNER,
            "plan_job": plan_job.value,
            "local": local,
            "global_job": global_job,
            "sign": sign,
            "gate": gate.value,
            "homebrew": homebrew,
            "custom_jobs": custom_jobs,
            "release": release_job.value,
            "app_names": list(plan.app_names),
        }
    )
