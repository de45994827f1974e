"""Options and project setup shared by the sweepp commands."""

from __future__ import annotations

import os
from dataclasses import dataclass

import click

from sweepp.config import SweepConfig, find_project_root, load_project_config
from sweepp.index.discovery import discover_files


def target_argument(f):
    return click.argument("target", required=False, default=".")(f)


def ext_option(f):
    return click.option(
        "--ext",
        default=None,
        help="Comma-separated file extensions to scan (default: ts,tsx,js,jsx)",
    )(f)


def ignore_option(f):
    return click.option(
        "--ignore",
        multiple=True,
        help="Glob or directory name to skip (repeatable)",
    )(f)


def check_local_option(f):
    return click.option(
        "--check-local/--no-check-local",
        "check_local",
        default=None,
        help="Remove imports of local/aliased/workspace modules that do not exist",
    )(f)


def fail_on_findings_option(f):
    return click.option(
        "--fail-on-findings",
        is_flag=True,
        help="Exit with code 5 when anything is reported (for CI)",
    )(f)


def json_mode(ctx) -> bool:
    return bool(ctx.obj.get("json")) if ctx.obj else False


@dataclass
class Run:
    project_root: str
    config: SweepConfig
    files: list[str]

    @property
    def project_name(self) -> str:
        return os.path.basename(self.project_root)


def prepare_run(target: str, ext=None, ignore=(), check_local=None, extra_ignore=()) -> Run:
    """Resolve the project root and config, then discover the files to analyze."""
    project_root = find_project_root()
    # --ignore a,b and --ignore a --ignore b are equivalent
    ignore = [p.strip() for value in ignore or () for p in value.split(",") if p.strip()]
    config = load_project_config(project_root).with_overrides(
        ext=ext, ignore=ignore, check_local=check_local
    )
    # Targets are relative to the working directory, ignore globs to the root
    files = discover_files(
        os.path.abspath(target),
        root=project_root,
        extensions=config.extensions,
        ignore=list(config.ignore) + list(extra_ignore),
    )
    return Run(project_root=str(project_root), config=config, files=files)
