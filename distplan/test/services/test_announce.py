from __future__ import annotations

from distplan.core.config import DistConfig
from distplan.plan.model import Artifact
from distplan.plan.triples import X64_MACOS
from distplan.services.announce import render_release_notes

from .._plans import DOWNLOAD_URL, LINUX, archive, plan_of, release, standard_plan


def test_heading_and_download_table() -> None:
    notes = render_release_notes(standard_plan(), DistConfig())
    assert notes.startswith("# v1.2.3\n\n## v1.2.3\n")
    assert "### Download app 1.2.3" in notes
    assert "| File | Platform | Checksum |" in notes
    row = (
        f"| [app-x86_64-unknown-linux-gnu.tar.xz]({DOWNLOAD_URL}/app-x86_64-unknown-linux-gnu.tar.xz)"
        f" | x64 Linux | {'3' * 64} |"
    )
    assert row in notes
    assert "Homebrew" not in notes
    assert notes.endswith("|\n")


def test_homebrew_install_section() -> None:
    config = DistConfig(publish_jobs=("homebrew",), tap="acme/homebrew-tap")
    notes = render_release_notes(standard_plan(), config)
    assert "### Install app 1.2.3" in notes
    assert "```sh\nbrew install acme/homebrew-tap/app\n```" in notes


def test_prerelease_note() -> None:
    notes = render_release_notes(standard_plan(version="2.0.0-rc.1"), DistConfig())
    assert "> This is a prerelease." in notes


def test_release_body_and_missing_checksum() -> None:
    app = release(
        [
            archive(X64_MACOS),
            Artifact(path="sha256.sum", target_triples=(), kind="checksum"),
        ],
        announcement_body="Fixed everything.\n",
    )
    notes = render_release_notes(plan_of(app), DistConfig())
    assert "### Release Notes\n\nFixed everything.\n" in notes
    assert " | Intel macOS | - |" in notes
    assert "sha256.sum" not in notes


def test_without_download_url_or_tag() -> None:
    notes = render_release_notes(plan_of(release([archive(LINUX)]), tag=None, url=None), DistConfig())
    assert not notes.startswith("# ")
    assert "| app-x86_64-unknown-linux-gnu.tar.xz | x64 Linux | - |" in notes
