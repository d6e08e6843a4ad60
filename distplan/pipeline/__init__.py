"""Artifact matrix and CI job graph."""

from __future__ import annotations

from .emitter import build_job_graph, build_matrix, publish_targets
from .jobs import (
    CustomJob,
    GithubRelease,
    HomebrewTap,
    JobGraph,
    MatrixEntry,
    PipelineJob,
    PublishTarget,
    publish_condition,
    publish_gate,
)

__all__ = [
    "CustomJob",
    "GithubRelease",
    "HomebrewTap",
    "JobGraph",
    "MatrixEntry",
    "PipelineJob",
    "PublishTarget",
    "build_job_graph",
    "build_matrix",
    "publish_condition",
    "publish_gate",
    "publish_targets",
]
