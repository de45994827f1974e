"""Remove unused import specifiers in place."""

from __future__ import annotations

import difflib

import click

from sweepp.analysis.imports import clean_files
from sweepp.commands.cmd_list import analyze_options
from sweepp.commands.options import (
    check_local_option,
    ext_option,
    ignore_option,
    json_mode,
    prepare_run,
    target_argument,
)
from sweepp.index.parser import read_source
from sweepp.output.formatter import json_envelope, rel_display, to_json


def _unified_diff(result, display: str) -> str:
    before = read_source(result.file_path).decode("utf-8", errors="replace")
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            result.new_code.splitlines(keepends=True),
            fromfile=f"a/{display}",
            tofile=f"b/{display}",
        )
    )


@click.command("clean")
@target_argument
@ext_option
@ignore_option
@check_local_option
@click.option("--dry-run", is_flag=True, help="Report what would change without writing files")
@click.option("--diff", "show_diff", is_flag=True, help="Print a unified diff of each change (implies --dry-run)")
@click.pass_context
def clean(ctx, target, ext, ignore, check_local, dry_run, show_diff):
    """Remove unused imports and show a summary.

    Only the import clause of a trimmed declaration is rewritten; the rest of
    each file is left byte-for-byte as it was.
    """
    dry_run = dry_run or show_diff
    run = prepare_run(target, ext=ext, ignore=ignore, check_local=check_local)
    results = clean_files(run.files, dry_run=dry_run, options=analyze_options(run))
    changed = sorted((r for r in results if r.changed), key=lambda r: r.file_path)
    total = sum(r.total_removed_specifiers for r in changed)

    action = "would change" if dry_run else "changed"
    verdict = f"{len(changed)} file(s) {action}, {total} specifier(s) removed"

    if json_mode(ctx):
        click.echo(
            to_json(
                json_envelope(
                    "clean",
                    summary={
                        "verdict": verdict,
                        "dry_run": dry_run,
                        "files_scanned": len(run.files),
                        "files_changed": len(changed),
                        "total_specifiers_removed": total,
                    },
                    project=run.project_name,
                    files=[
                        dict(r.to_dict(include_code=show_diff), file=rel_display(r.file_path, run.project_root))
                        for r in changed
                    ],
                )
            )
        )
        return

    click.echo(f"VERDICT: {verdict}")
    for r in changed:
        display = rel_display(r.file_path, run.project_root)
        names = ", ".join(name for removed in r.removed for name in removed.specifiers)
        mark = "~" if dry_run else "✔"
        click.echo(click.style(f"{mark} {display} removed: {names}", fg="green"))
        if show_diff:
            click.echo(_unified_diff(r, display), nl=False)

    click.echo("")
    click.echo(click.style("Clean Summary", bold=True))
    click.echo(f"Files changed: {len(changed)}")
    click.echo(f"Total specifiers removed: {total}")
