"""Derive the CI job graph and build matrix from a release plan.

Graph shape:

    plan -> upload-local-artifacts[matrix] -> upload-global-artifacts?
         -> sign-windows-artifacts? -> should-publish
         -> { publish-homebrew-formula?, custom-<job>..., publish-release }

Publish jobs share only the `should-publish` dependency and run concurrently;
no ordering among them (release creation included) is implied.
"""

from __future__ import annotations

from distplan.core.config import JOB_NAME_RULE, DistConfig, is_valid_job_name
from distplan.core.result import Err, Ok, Result
from distplan.errors import ConfigError, DistError, MissingField
from distplan.pipeline.jobs import (
    GATE_JOB,
    GLOBAL_JOB,
    LOCAL_JOB,
    PLAN_JOB,
    PUSHED_TAG,
    SIGN_JOB,
    CustomJob,
    GithubRelease,
    HomebrewTap,
    JobGraph,
    MatrixEntry,
    PipelineJob,
    PublishTarget,
    publish_condition,
)
from distplan.plan.model import ReleasePlan
from distplan.plan.triples import github_runner, is_windows


def build_matrix(plan: ReleasePlan, config: DistConfig) -> tuple[MatrixEntry, ...]:
    """One entry per target platform, sorted by target triple."""
    return tuple(
        MatrixEntry(
            runner=github_runner(target),
            install=config.install_command,
            args=f"--artifacts=local --target={target}",
            targets=(target,),
        )
        for target in plan.targets()
    )


def publish_targets(
    config: DistConfig,
) -> Result[tuple[PublishTarget, ...], MissingField | ConfigError]:
    targets: list[PublishTarget] = []
    if config.wants_homebrew:
        if config.tap is None:
            return Err(
                MissingField(
                    field="tap",
                    where="publish_jobs contains 'homebrew'",
                    hint="Set tap = \"owner/homebrew-tap\" in [dist]",
                )
            )
        targets.append(HomebrewTap(tap=config.tap))
    for name in config.user_publish_jobs:
        if not is_valid_job_name(name):
            return Err(ConfigError(f"invalid user publish job {name!r}: {JOB_NAME_RULE}"))
        targets.append(CustomJob(name=name))
    targets.append(GithubRelease(create=config.create_release))
    return Ok(tuple(targets))


def build_job_graph(plan: ReleasePlan, config: DistConfig) -> Result[JobGraph, DistError]:
    targets = publish_targets(config)
    if isinstance(targets, Err):
        return targets

    # PR runs only build when pr_run_mode uploads artifacts.
    build_condition = None if config.pr_run_mode == "upload" else PUSHED_TAG

    jobs: list[PipelineJob] = [PipelineJob(id=PLAN_JOB, kind="plan")]
    build_ids: list[str] = []

    matrix = build_matrix(plan, config)
    if matrix:
        jobs.append(
            PipelineJob(
                id=LOCAL_JOB,
                kind="build-local",
                needs=(PLAN_JOB,),
                condition=build_condition,
                matrix=matrix,
            )
        )
        build_ids.append(LOCAL_JOB)

    if config.global_task is not None:
        jobs.append(
            PipelineJob(
                id=GLOBAL_JOB,
                kind="build-global",
                needs=(PLAN_JOB, *build_ids),
                condition=build_condition,
            )
        )
        build_ids.append(GLOBAL_JOB)

    gate_needs = list(build_ids)
    if config.ssldotcom_windows_sign != "off" and any(is_windows(t) for t in plan.targets()):
        jobs.append(
            PipelineJob(
                id=SIGN_JOB,
                kind="sign",
                needs=(PLAN_JOB, *build_ids),
                condition=PUSHED_TAG,
            )
        )
        gate_needs.append(SIGN_JOB)

    jobs.append(
        PipelineJob(
            id=GATE_JOB,
            kind="gate",
            needs=(PLAN_JOB, *gate_needs),
            condition=PUSHED_TAG,
        )
    )

    condition = publish_condition(config.publish_prereleases)
    for target in targets.value:
        jobs.append(
            PipelineJob(
                id=target.job_id,
                kind="publish",
                needs=(PLAN_JOB, GATE_JOB),
                condition=condition,
            )
        )

    graph = JobGraph(jobs=tuple(jobs), publish_targets=targets.value)
    order = graph.topological_order()
    if isinstance(order, Err):
        return order
    return Ok(graph)
