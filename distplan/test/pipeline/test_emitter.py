from __future__ import annotations

from distplan.core.config import DistConfig, GlobalTask
from distplan.core.result import Err, Ok
from distplan.errors import ConfigError, MissingField
from distplan.pipeline import build_job_graph, build_matrix, publish_targets
from distplan.pipeline.jobs import (
    GATE_JOB,
    GLOBAL_JOB,
    HOMEBREW_JOB,
    LOCAL_JOB,
    PLAN_JOB,
    PUSHED_TAG,
    RELEASE_JOB,
    SIGN_JOB,
    CustomJob,
    GithubRelease,
    HomebrewTap,
    JobGraph,
    publish_condition,
)
from distplan.plan.model import Artifact, ReleasePlan

from .._plans import LINUX, archive, plan_of, release, standard_plan


def _graph(config: DistConfig, plan: ReleasePlan | None = None) -> JobGraph:
    result = build_job_graph(plan or standard_plan(), config)
    assert isinstance(result, Ok), result
    return result.value


class TestMatrix:
    def test_one_entry_per_target_sorted(self) -> None:
        matrix = build_matrix(standard_plan(), DistConfig())
        assert [m.targets for m in matrix] == [
            ("aarch64-apple-darwin",),
            ("x86_64-apple-darwin",),
            ("x86_64-pc-windows-msvc",),
            ("x86_64-unknown-linux-gnu",),
        ]
        assert [m.runner for m in matrix] == ["macos-14", "macos-12", "windows-2019", "ubuntu-20.04"]
        assert matrix[3].args == "--artifacts=local --target=x86_64-unknown-linux-gnu"

    def test_install_command_from_config(self) -> None:
        matrix = build_matrix(standard_plan(), DistConfig(install_command="pipx install dist"))
        assert {m.install for m in matrix} == {"pipx install dist"}


class TestPublishTargets:
    def test_default_is_release_only(self) -> None:
        assert publish_targets(DistConfig()) == Ok((GithubRelease(create=True),))

    def test_order(self) -> None:
        config = DistConfig(publish_jobs=("homebrew",), tap="acme/tap", user_publish_jobs=("npm", "docs"))
        assert publish_targets(config) == Ok(
            (HomebrewTap("acme/tap"), CustomJob("npm"), CustomJob("docs"), GithubRelease(create=True))
        )

    def test_homebrew_without_tap(self) -> None:
        result = publish_targets(DistConfig(publish_jobs=("homebrew",)))
        assert isinstance(result, Err)
        assert isinstance(result.error, MissingField)
        assert result.error.field == "tap"

    def test_user_job_name_must_be_a_job_id(self) -> None:
        for name in ("publish crates", "./npm", "2fast", ""):
            result = publish_targets(DistConfig(user_publish_jobs=(name,)))
            assert isinstance(result, Err), name
            assert isinstance(result.error, ConfigError)


class TestJobGraph:
    def test_default_shape(self) -> None:
        graph = _graph(DistConfig())
        assert graph.ids() == (PLAN_JOB, LOCAL_JOB, GATE_JOB, RELEASE_JOB)
        gate = graph.job(GATE_JOB)
        assert gate is not None
        assert gate.needs == (PLAN_JOB, LOCAL_JOB)
        assert gate.condition == PUSHED_TAG
        release_job = graph.job(RELEASE_JOB)
        assert release_job is not None
        assert release_job.needs == (PLAN_JOB, GATE_JOB)
        assert release_job.condition == publish_condition(False)

    def test_prerelease_publishing_allowed(self) -> None:
        graph = _graph(DistConfig(publish_prereleases=True))
        release_job = graph.job(RELEASE_JOB)
        assert release_job is not None
        assert release_job.condition == PUSHED_TAG

    def test_build_condition_follows_pr_run_mode(self) -> None:
        plan_mode = _graph(DistConfig(pr_run_mode="plan")).job(LOCAL_JOB)
        upload_mode = _graph(DistConfig(pr_run_mode="upload")).job(LOCAL_JOB)
        assert plan_mode is not None and upload_mode is not None
        assert plan_mode.condition == PUSHED_TAG
        assert upload_mode.condition is None

    def test_global_and_sign_jobs(self) -> None:
        config = DistConfig(
            global_task=GlobalTask(runner="ubuntu-22.04", install="true", args="--artifacts=global"),
            ssldotcom_windows_sign="test",
        )
        graph = _graph(config)
        assert graph.ids() == (PLAN_JOB, LOCAL_JOB, GLOBAL_JOB, SIGN_JOB, GATE_JOB, RELEASE_JOB)
        sign = graph.job(SIGN_JOB)
        assert sign is not None
        assert sign.needs == (PLAN_JOB, LOCAL_JOB, GLOBAL_JOB)
        gate = graph.job(GATE_JOB)
        assert gate is not None
        assert gate.needs == (PLAN_JOB, LOCAL_JOB, GLOBAL_JOB, SIGN_JOB)

    def test_sign_needs_a_windows_target(self) -> None:
        plan = plan_of(release([archive(LINUX)]))
        graph = _graph(DistConfig(ssldotcom_windows_sign="prod"), plan)
        assert graph.job(SIGN_JOB) is None

    def test_publish_jobs_run_side_by_side(self) -> None:
        config = DistConfig(publish_jobs=("homebrew",), tap="acme/tap", user_publish_jobs=("npm",))
        graph = _graph(config)
        publish = [j for j in graph.jobs if j.kind == "publish"]
        assert [j.id for j in publish] == [HOMEBREW_JOB, "custom-npm", RELEASE_JOB]
        assert {j.needs for j in publish} == {(PLAN_JOB, GATE_JOB)}

    def test_homebrew_without_tap_fails(self) -> None:
        result = build_job_graph(standard_plan(), DistConfig(publish_jobs=("homebrew",)))
        assert isinstance(result, Err)
        assert isinstance(result.error, MissingField)

    def test_no_targets_skips_the_build_matrix(self) -> None:
        checksums_only = release(
            [Artifact(path="sha256.sum", target_triples=(), kind="checksum")], targets=()
        )
        graph = _graph(DistConfig(), plan_of(checksums_only))
        assert graph.job(LOCAL_JOB) is None
        gate = graph.job(GATE_JOB)
        assert gate is not None
        assert gate.needs == (PLAN_JOB,)

    def test_graph_is_acyclic(self) -> None:
        config = DistConfig(publish_jobs=("homebrew",), tap="acme/tap", user_publish_jobs=("a", "b"))
        order = _graph(config).topological_order()
        assert isinstance(order, Ok)
        assert order.value[0] == PLAN_JOB
        assert order.value.index(GATE_JOB) < order.value.index(RELEASE_JOB)
