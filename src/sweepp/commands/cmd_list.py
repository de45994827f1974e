"""List unused import specifiers without touching any file."""

from __future__ import annotations

import click

from sweepp.analysis.conventions import build_implicit_imports
from sweepp.analysis.imports import AnalyzeOptions, clean_files
from sweepp.commands.options import (
    check_local_option,
    ext_option,
    fail_on_findings_option,
    ignore_option,
    json_mode,
    prepare_run,
    target_argument,
)
from sweepp.exit_codes import GateFailureError
from sweepp.output.formatter import format_table, json_envelope, rel_display, to_json
from sweepp.resolve import build_resolver


def analyze_options(run) -> AnalyzeOptions:
    """AnalyzeOptions for a prepared run (shared with `clean`)."""
    resolver = build_resolver(run.project_root) if run.config.check_local else None
    if resolver is not None and resolver.workspace.is_monorepo:
        workspace = resolver.workspace
        click.echo(
            click.style(f"Detected {workspace.kind} monorepo with {len(workspace.packages)} package(s)", dim=True),
            err=True,
        )
    return AnalyzeOptions(
        check_local_imports=run.config.check_local,
        resolver=resolver,
        implicit_imports=build_implicit_imports(run.config.implicit_imports),
    )


@click.command("list")
@target_argument
@ext_option
@ignore_option
@check_local_option
@fail_on_findings_option
@click.pass_context
def list_cmd(ctx, target, ext, ignore, check_local, fail_on_findings):
    """List unused import specifiers.

    TARGET is a directory, a file or a glob (default: current directory).

    \b
    Examples:
      sweepp list src
      sweepp list --ext ts,tsx --check-local
    """
    run = prepare_run(target, ext=ext, ignore=ignore, check_local=check_local)
    results = clean_files(run.files, dry_run=True, options=analyze_options(run))
    changed = sorted((r for r in results if r.changed), key=lambda r: r.file_path)

    total = sum(r.total_removed_specifiers for r in changed)
    verdict = (
        f"{len(changed)} file(s) with {total} unused import(s)"
        if changed
        else "no unused imports found"
    )

    if json_mode(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "list",
                    summary={
                        "verdict": verdict,
                        "files_scanned": len(run.files),
                        "files_with_unused": len(changed),
                        "unused_imports": total,
                    },
                    project=run.project_name,
                    files=[
                        {
                            "file": rel_display(r.file_path, run.project_root),
                            "specifiers": [name for removed in r.removed for name in removed.specifiers],
                            "removed": [{"source": rm.source, "specifiers": rm.specifiers} for rm in r.removed],
                        }
                        for r in changed
                    ],
                )
            )
        )
    else:
        click.echo(f"VERDICT: {verdict}")
        if changed:
            rows = [
                [
                    rel_display(r.file_path, run.project_root),
                    str(r.total_removed_specifiers),
                    ", ".join(name for removed in r.removed for name in removed.specifiers),
                ]
                for r in changed
            ]
            click.echo("")
            click.echo(format_table(["File", "Count", "Unused Imports"], rows))

    if fail_on_findings and changed:
        raise GateFailureError(f"{total} unused import(s) found.")
