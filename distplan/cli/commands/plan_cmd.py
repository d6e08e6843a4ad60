from __future__ import annotations

import json
from pathlib import Path

import typer

from distplan.cli.commands._helpers import exit_on_error, load_plan
from distplan.cli.context import CLIContext, build_context
from distplan.pipeline.emitter import build_job_graph
from distplan.pipeline.jobs import JobGraph, publish_gate
from distplan.plan.model import ReleasePlan
from distplan.plan.plan_file import plan_to_obj


def plan(
    plan: Path | None = typer.Option(None, "--plan", help="Release plan manifest (JSON)"),
    config: Path | None = typer.Option(None, "--config", help="Path to distplan.toml"),
    root: Path = typer.Option(Path("."), "--root", help="Repository root"),
    json_out: bool = typer.Option(False, "--json", help="Print the job graph as JSON"),
) -> None:
    """Show the CI job graph and build matrix for a release plan."""
    ctx = build_context(root=root, config_path=config)
    release_plan = load_plan(ctx, plan)
    graph = exit_on_error(build_job_graph(release_plan, ctx.config), ctx)
    order = exit_on_error(graph.topological_order(), ctx)

    if json_out:
        obj = _graph_obj(release_plan, graph, order, publish_prereleases=ctx.config.publish_prereleases)
        ctx.console.raw(json.dumps(obj, indent=2) + "\n")
        return

    _print_graph(ctx, release_plan, graph, order)


def _graph_obj(
    release_plan: ReleasePlan,
    graph: JobGraph,
    order: tuple[str, ...],
    *,
    publish_prereleases: bool,
) -> dict[str, object]:
    return {
        "plan": plan_to_obj(release_plan),
        "publish_prereleases": publish_prereleases,
        "publishing_allowed": publish_gate(release_plan.announcement_is_prerelease, publish_prereleases),
        "order": list(order),
        "jobs": [
            {
                "id": j.id,
                "kind": j.kind,
                "needs": list(j.needs),
                "if": j.condition,
                "matrix": [
                    {"runner": m.runner, "install": m.install, "args": m.args, "targets": list(m.targets)}
                    for m in j.matrix
                ],
            }
            for j in graph.jobs
        ],
    }


def _print_graph(
    ctx: CLIContext, release_plan: ReleasePlan, graph: JobGraph, order: tuple[str, ...]
) -> None:
    console = ctx.console
    rows: list[list[str]] = []
    for job_id in order:
        job = graph.job(job_id)
        if job is None:
            continue
        rows.append([job.id, job.kind, ", ".join(job.needs) or "-", job.condition or "always"])
    console.table("Jobs", ["job", "kind", "needs", "if"], rows)

    local = [j for j in graph.jobs if j.matrix]
    if local:
        console.table(
            "Build matrix",
            ["runner", "targets", "args"],
            [[m.runner, " ".join(m.targets), m.args] for j in local for m in j.matrix],
        )

    allowed = publish_gate(release_plan.announcement_is_prerelease, ctx.config.publish_prereleases)
    if release_plan.announcement_is_prerelease:
        state = "publish jobs run" if allowed else "publish jobs skipped"
        console.info(f"prerelease announcement: {state}")
