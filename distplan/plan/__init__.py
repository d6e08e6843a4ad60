"""Release plan model: what was built, for which platforms, with which artifacts."""

from __future__ import annotations

from .model import AppRelease, Artifact, ArtifactKind, PlatformBuild, ReleasePlan
from .plan_file import plan_from_obj, read_plan_file, write_plan_file
from .semver import AnnouncementTag, Version, parse_announcement_tag, parse_version
from .validate import app_release, build_release_plan

__all__ = [
    "AnnouncementTag",
    "AppRelease",
    "Artifact",
    "ArtifactKind",
    "PlatformBuild",
    "ReleasePlan",
    "Version",
    "app_release",
    "build_release_plan",
    "parse_announcement_tag",
    "parse_version",
    "plan_from_obj",
    "read_plan_file",
    "write_plan_file",
]
