"""Render, write and check the generated release documents.

    files = render_outputs(plan, config, console)   # nothing touches disk
    write_outputs(root, files.value)                # atomic per file
    stale = check_outputs(root, files.value)        # for `generate --check`
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import yaml

from distplan.context.ci import build_ci_context
from distplan.context.formula import build_formula_context, formula_path, has_macos_archive
from distplan.core.config import DistConfig
from distplan.core.files import atomic_write_text, read_text_or_none
from distplan.core.result import Err, Ok, Result
from distplan.errors import DistError, MalformedTemplate, WriteFailed
from distplan.output.console import ConsoleProtocol, Style
from distplan.pipeline.emitter import build_job_graph
from distplan.pipeline.jobs import JobGraph
from distplan.plan.model import AppRelease, ReleasePlan
from distplan.render.loader import CI_GITHUB_TEMPLATE, HOMEBREW_TEMPLATE, load_template

FileKind = Literal["ci", "formula"]


@dataclass(frozen=True, slots=True)
class RenderedFile:
    # Repository-relative, `/`-separated.
    path: str
    content: str
    kind: FileKind


def check_ci_document(text: str, graph: JobGraph) -> list[str]:
    """Problems found when reading the rendered workflow back as YAML.

    The document must load, declare exactly the jobs of `graph` and give each
    job the same `needs` list.
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return [f"rendered workflow is not valid YAML: {e}"]

    if not isinstance(doc, dict) or not isinstance(doc.get("jobs"), dict):
        return ["rendered workflow has no jobs mapping"]

    jobs: dict[str, object] = doc["jobs"]
    problems: list[str] = []
    expected = graph.ids()
    missing = [j for j in expected if j not in jobs]
    extra = [j for j in jobs if j not in expected]
    if missing:
        problems.append(f"jobs missing from workflow: {', '.join(missing)}")
    if extra:
        problems.append(f"unexpected jobs in workflow: {', '.join(extra)}")

    for job in graph.jobs:
        body = jobs.get(job.id)
        if not isinstance(body, dict):
            continue
        needs = body.get("needs", [])
        if isinstance(needs, str):
            needs = [needs]
        if list(needs) != list(job.needs):
            problems.append(f"{job.id}: needs {needs} in workflow, {list(job.needs)} in job graph")
    return problems


def render_ci(plan: ReleasePlan, config: DistConfig, graph: JobGraph) -> Result[RenderedFile, DistError]:
    template = load_template(CI_GITHUB_TEMPLATE)
    if isinstance(template, Err):
        return template

    context = build_ci_context(plan, config, graph)
    if isinstance(context, Err):
        return context

    text = template.value.render(context.value)
    if isinstance(text, Err):
        return text

    problems = check_ci_document(text.value, graph)
    if problems:
        return Err(MalformedTemplate(detail="; ".join(problems), template=CI_GITHUB_TEMPLATE))
    return Ok(RenderedFile(path=config.ci_path, content=text.value, kind="ci"))


def render_formula(
    release: AppRelease, plan: ReleasePlan, config: DistConfig
) -> Result[RenderedFile, DistError]:
    template = load_template(HOMEBREW_TEMPLATE)
    if isinstance(template, Err):
        return template

    context = build_formula_context(release, plan, config)
    if isinstance(context, Err):
        return context

    text = template.value.render(context.value)
    if isinstance(text, Err):
        return text
    return Ok(
        RenderedFile(path=formula_path(config, release.app_name), content=text.value, kind="formula")
    )


def render_outputs(
    plan: ReleasePlan, config: DistConfig, console: ConsoleProtocol
) -> Result[tuple[RenderedFile, ...], DistError]:
    """Render the workflow and every Homebrew formula.

    Nothing is returned unless every document rendered.
    """
    if config.tap is not None and not config.wants_homebrew:
        console.warning(f"tap {config.tap} is set but 'homebrew' is not in publish_jobs")

    graph = build_job_graph(plan, config)
    if isinstance(graph, Err):
        return graph

    ci = render_ci(plan, config, graph.value)
    if isinstance(ci, Err):
        return ci
    files: list[RenderedFile] = [ci.value]

    if config.wants_homebrew:
        for release in plan.releases:
            if not has_macos_archive(release):
                console.warning(f"{release.app_name}: no macOS archive, skipping Homebrew formula")
                continue
            formula = render_formula(release, plan, config)
            if isinstance(formula, Err):
                return formula
            files.append(formula.value)

    for f in files:
        console.print(f"rendered {f.path}", Style.DIM)
    return Ok(tuple(files))


def write_outputs(root: Path, files: tuple[RenderedFile, ...]) -> Result[list[Path], WriteFailed]:
    written: list[Path] = []
    for f in files:
        path = root / f.path
        try:
            atomic_write_text(path, f.content)
        except OSError as e:
            return Err(WriteFailed(message=f"failed to write {f.path}: {e}", path=path))
        written.append(path)
    return Ok(written)


def check_outputs(root: Path, files: tuple[RenderedFile, ...]) -> tuple[str, ...]:
    """Paths whose on-disk content differs from the rendered content."""
    stale: list[str] = []
    for f in files:
        current = read_text_or_none(root / f.path)
        if current != f.content:
            stale.append(f.path)
    return tuple(stale)
