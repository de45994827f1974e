"""Report top-level declarations nothing references (dead-code candidates)."""

from __future__ import annotations

import click

from sweepp.analysis.conventions import build_exemptions
from sweepp.analysis.dead_code import find_unused_code
from sweepp.commands.options import (
    ext_option,
    fail_on_findings_option,
    ignore_option,
    json_mode,
    prepare_run,
    target_argument,
)
from sweepp.exit_codes import GateFailureError
from sweepp.index.discovery import DEFAULT_IGNORE_DIRS, ROUTE_SPECIAL_FILES
from sweepp.output.formatter import json_envelope, loc, rel_display, to_json
from sweepp.resolve import build_resolver

HEURISTIC_NOTE = "Heuristic detection. Review before removal."


@click.command("unused-code")
@target_argument
@ext_option
@ignore_option
@click.option(
    "--converge",
    is_flag=True,
    help="Follow re-export chains of any depth (default: one hop)",
)
@fail_on_findings_option
@click.pass_context
def unused_code(ctx, target, ext, ignore, converge, fail_on_findings):
    """List potentially unused top-level code (safe preview, nothing is changed).

    Build output, tool directories and framework entry files (pages/_app,
    app/layout, ...) are skipped; exported declarations under pages/, app/
    and routes/ are never reported.
    """
    run = prepare_run(
        target,
        ext=ext,
        ignore=ignore,
        extra_ignore=list(DEFAULT_IGNORE_DIRS) + list(ROUTE_SPECIAL_FILES),
    )
    resolver = build_resolver(run.project_root)
    workspace = resolver.workspace
    if workspace.is_monorepo and not json_mode(ctx):
        click.echo(
            click.style(f"Detected {workspace.kind} monorepo with {len(workspace.packages)} package(s)", dim=True),
            err=True,
        )

    items = find_unused_code(
        run.files,
        resolver,
        run.project_root,
        exemptions=build_exemptions(run.config.route_dirs),
        converge=converge,
    )
    exported = sum(1 for it in items if it.exported)
    verdict = f"{len(items)} unused code candidate(s)" if items else "no unused code candidates found"

    if json_mode(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "unused-code",
                    summary={
                        "verdict": verdict,
                        "files_scanned": len(run.files),
                        "candidates": len(items),
                        "exported_candidates": exported,
                        "converge": converge,
                        "note": HEURISTIC_NOTE,
                    },
                    project=run.project_name,
                    items=[
                        dict(it.to_dict(), file=rel_display(it.file, run.project_root))
                        for it in items
                    ],
                )
            )
        )
    else:
        click.echo(f"VERDICT: {verdict}")
        if items:
            click.echo("")
        for it in items:
            parts = [
                click.style(loc(rel_display(it.file, run.project_root), it.start_line), fg="yellow"),
                it.name,
                click.style(it.kind, dim=True),
            ]
            if it.exported:
                parts.append(click.style("exported", fg="magenta"))
            click.echo(" ".join(parts))
        if items:
            click.echo(f"\nSummary: {len(items)} unused code candidate(s) ({exported} exported).")
            click.echo(click.style(f"Note: {HEURISTIC_NOTE}", dim=True))

    if fail_on_findings and items:
        raise GateFailureError(f"{len(items)} unused code candidate(s) found.")
