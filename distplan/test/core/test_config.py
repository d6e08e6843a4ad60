"""Tests for distplan.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from distplan.core.config import (
    DEFAULT_INSTALL_COMMAND,
    DistConfig,
    GlobalTask,
    load_config,
    load_config_or_default,
)
from distplan.core.result import Err, Ok


class TestDefaults:
    def test_defaults(self) -> None:
        config = DistConfig()
        assert config.rust_version is None
        assert config.fail_fast is False
        assert config.pr_run_mode == "plan"
        assert config.global_task is None
        assert config.ssldotcom_windows_sign == "off"
        assert config.publish_jobs == ()
        assert config.tap is None
        assert config.create_release is True
        assert config.publish_prereleases is False
        assert config.install_command == DEFAULT_INSTALL_COMMAND
        assert config.ci_path == ".github/workflows/release.yml"
        assert config.formula_dir == "Formula"

    def test_frozen(self) -> None:
        config = DistConfig()
        with pytest.raises(AttributeError):
            config.tap = "acme/tap"  # type: ignore[misc]

    def test_wants_homebrew(self) -> None:
        assert DistConfig(publish_jobs=("homebrew",)).wants_homebrew
        assert not DistConfig().wants_homebrew


class TestFromDict:
    def test_full_table(self) -> None:
        result = DistConfig.from_dict(
            {
                "rust_version": "1.78.0",
                "fail_fast": True,
                "pr_run_mode": "upload",
                "global_task": {"runner": "ubuntu-22.04", "install": "pip install x"},
                "ssldotcom_windows_sign": "prod",
                "publish_jobs": ["homebrew"],
                "tap": "acme/homebrew-tap",
                "user_publish_jobs": ["npm", "docs"],
                "create_release": False,
                "publish_prereleases": True,
                "dependencies": ["openssl", "xz", "openssl"],
                "license": "MIT",
            }
        )
        assert isinstance(result, Ok)
        config = result.value
        assert config.rust_version == "1.78.0"
        assert config.fail_fast is True
        assert config.pr_run_mode == "upload"
        assert config.global_task == GlobalTask(
            runner="ubuntu-22.04", install="pip install x", args="--artifacts=global"
        )
        assert config.ssldotcom_windows_sign == "prod"
        assert config.tap == "acme/homebrew-tap"
        assert config.user_publish_jobs == ("npm", "docs")
        assert config.create_release is False
        assert config.publish_prereleases is True
        assert config.dependencies == ("openssl", "xz")

    @pytest.mark.parametrize(
        ("data", "needle"),
        [
            ({"pr_run_mode": "sometimes"}, "pr_run_mode"),
            ({"ssldotcom_windows_sign": "maybe"}, "ssldotcom_windows_sign"),
            ({"publish_jobs": ["npm"]}, "unknown publish job"),
            ({"publish_jobs": "homebrew"}, "publish_jobs"),
            ({"fail_fast": "yes"}, "fail_fast"),
            ({"user_publish_jobs": ["a", "a"]}, "duplicate"),
            ({"user_publish_jobs": [" "]}, "invalid user publish job"),
            ({"user_publish_jobs": ["publish crates"]}, "invalid user publish job"),
            ({"user_publish_jobs": ["9lives"]}, "invalid user publish job"),
            ({"user_publish_jobs": ["../evil"]}, "invalid user publish job"),
            ({"user_publish_jobs": ["npm", "./npm"]}, "duplicate"),
            ({"global_task": {"runner": "ubuntu-22.04"}}, "global_task"),
            ({"global_task": "ubuntu"}, "global_task"),
        ],
    )
    def test_invalid_values(self, data: dict[str, object], needle: str) -> None:
        result = DistConfig.from_dict(data)
        assert isinstance(result, Err)
        assert needle in result.error

    def test_user_publish_job_local_prefix_is_stripped(self) -> None:
        result = DistConfig.from_dict({"user_publish_jobs": ["./publish-npm", "docs_site"]})
        assert isinstance(result, Ok)
        assert result.value.user_publish_jobs == ("publish-npm", "docs_site")


class TestLoadConfig:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "distplan.toml"
        path.write_text(
            '[dist]\npublish_jobs = ["homebrew"]\ntap = "acme/homebrew-tap"\n',
            encoding="utf-8",
        )
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.wants_homebrew
        assert result.value.tap == "acme/homebrew-tap"

    def test_missing_dist_table(self, tmp_path: Path) -> None:
        path = tmp_path / "distplan.toml"
        path.write_text("[other]\nx = 1\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "[dist]" in result.error.message
        assert result.error.path == path

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "distplan.toml"
        path.write_text("[dist\n", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_invalid_value_is_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "distplan.toml"
        path.write_text('[dist]\npr_run_mode = "never"\n', encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "pr_run_mode" in result.error.message

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "nope.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_or_default_when_absent(self, tmp_path: Path) -> None:
        result = load_config_or_default(tmp_path / "distplan.toml")
        assert result == Ok(DistConfig())

    def test_or_default_still_reports_broken_file(self, tmp_path: Path) -> None:
        path = tmp_path / "distplan.toml"
        path.write_text("not toml = = =", encoding="utf-8")
        assert isinstance(load_config_or_default(path), Err)
