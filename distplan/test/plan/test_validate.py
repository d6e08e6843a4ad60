from __future__ import annotations

from distplan.core.result import Err, Ok
from distplan.plan.model import Artifact
from distplan.plan.triples import ARM64_MACOS, X64_MACOS
from distplan.plan.validate import app_release, build_release_plan

from .._plans import LINUX, archive, release


def test_targets_default_to_artifact_targets() -> None:
    app = release([archive(ARM64_MACOS), archive(LINUX), archive(ARM64_MACOS, app="other")])
    assert app.targets == (ARM64_MACOS, LINUX)


def test_invalid_version_is_rejected() -> None:
    result = app_release(app_name="app", app_version="one.two", artifacts=[archive(LINUX)])
    assert isinstance(result, Err)
    assert result.error.field == "app_version"


def test_empty_plan_is_rejected() -> None:
    result = build_release_plan([])
    assert isinstance(result, Err)
    assert "no releases" in result.error.message


def test_duplicate_release_is_rejected() -> None:
    app = release([archive(LINUX)])
    result = build_release_plan([app, app])
    assert isinstance(result, Err)
    assert "duplicate release" in result.error.message


def test_same_app_different_versions_is_allowed() -> None:
    result = build_release_plan([release([archive(LINUX)]), release([archive(LINUX)], version="1.2.4")])
    assert isinstance(result, Ok)


def test_empty_artifact_path_is_rejected() -> None:
    bad = Artifact(path=" ", target_triples=(LINUX,), kind="archive")
    result = build_release_plan([release([bad])])
    assert isinstance(result, Err)
    assert result.error.field == "artifacts.path"


def test_unknown_kind_is_rejected() -> None:
    bad = Artifact(path="x.zip", target_triples=(LINUX,), kind="bundle")  # type: ignore[arg-type]
    result = build_release_plan([release([bad])])
    assert isinstance(result, Err)
    assert result.error.field == "artifacts.kind"


def test_target_without_artifact_is_rejected() -> None:
    app = release([archive(LINUX)], targets=[LINUX, X64_MACOS])
    result = build_release_plan([app])
    assert isinstance(result, Err)
    assert X64_MACOS in result.error.message


def test_tag_version_must_match() -> None:
    result = build_release_plan([release([archive(LINUX)])], announcement_tag="v9.9.9")
    assert isinstance(result, Err)
    assert result.error.field == "announcement_tag"


def test_tag_matches_version_with_build_metadata() -> None:
    result = build_release_plan([release([archive(LINUX)], version="1.2.3+build.5")], announcement_tag="v1.2.3")
    assert isinstance(result, Ok)

    prerelease = build_release_plan([release([archive(LINUX)], version="1.2.3-rc.1")], announcement_tag="v1.2.3")
    assert isinstance(prerelease, Err)


def test_app_tag_only_checks_that_app() -> None:
    a = release([archive(LINUX)], name="a", version="1.0.0")
    b = release([archive(LINUX, app="b")], name="b", version="2.0.0")
    result = build_release_plan([a, b], announcement_tag="b-v2.0.0")
    assert isinstance(result, Ok)


def test_download_url_trailing_slash_is_dropped() -> None:
    result = build_release_plan(
        [release([archive(LINUX)])], artifact_download_url="https://example.com/dl/"
    )
    assert isinstance(result, Ok)
    assert result.value.artifact_download_url == "https://example.com/dl"


def test_announcement_is_prerelease_if_any_release_is() -> None:
    a = release([archive(LINUX)], name="a", version="1.0.0")
    b = release([archive(LINUX, app="b")], name="b", version="2.0.0-rc.1")
    result = build_release_plan([a, b])
    assert isinstance(result, Ok)
    assert result.value.announcement_is_prerelease
    assert not result.value.release("a").is_prerelease  # type: ignore[union-attr]
    assert result.value.release("missing") is None


def test_plan_targets_are_sorted_and_unique() -> None:
    a = release([archive(X64_MACOS), archive(LINUX)], name="a")
    b = release([archive(ARM64_MACOS, app="b"), archive(LINUX, app="b")], name="b")
    result = build_release_plan([a, b])
    assert isinstance(result, Ok)
    assert result.value.targets() == (ARM64_MACOS, X64_MACOS, LINUX)
