"""Shared test fixtures and helpers for sweepp tests.

Provides:
- Parsing helpers: parse(), analysis_of()
- CliRunner fixtures: cli_runner, invoke_cli()
- Factory fixture: project_factory for custom file layouts
- JSON validation helpers: parse_json_output(), assert_json_envelope()
"""

from __future__ import annotations

import json
import os

import pytest
from click.testing import CliRunner

# ===========================================================================
# Parsing helpers
# ===========================================================================


def parse(code, path="module.tsx"):
    """Parse a source string; returns (tree, source_bytes, extractor)."""
    from sweepp.languages.registry import parse_module

    source = code.encode("utf-8")
    tree, extractor = parse_module(source, path)
    return tree, source, extractor


def analysis_of(code, path="module.tsx"):
    """FileAnalysis for a source string."""
    from sweepp.analysis.dead_code import collect_file_analysis

    return collect_file_analysis(code.encode("utf-8"), path)


# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False):
    """Invoke the sweepp CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["list", "src"])
        cwd: directory to run in
        json_mode: if True, prepend --json flag
    Returns:
        click.testing.Result
    """
    from sweepp.cli import cli

    full_args = []
    if json_mode:
        full_args.append("--json")
    full_args.extend(args)

    old_cwd = os.getcwd()
    try:
        if cwd:
            os.chdir(str(cwd))
        result = runner.invoke(cli, full_args, catch_exceptions=False)
    finally:
        os.chdir(old_cwd)

    return result


# ===========================================================================
# JSON validation helpers
# ===========================================================================


def parse_json_output(result, command=None, exit_code=0):
    """Parse the JSON document a command wrote to stdout.

    Log lines go to stderr, so only ``result.stdout`` is parsed.
    """
    assert result.exit_code == exit_code, (
        f"Command {command or '?'} exited {result.exit_code} (expected {exit_code}):\n{result.output}"
    )
    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.stdout[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the sweepp envelope contract."""
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    assert data.get("schema") == "sweepp-envelope-v1"
    for key in ("command", "version", "summary"):
        assert key in data, f"Missing '{key}' key in envelope"
    assert "timestamp" in data.get("_meta", {}), "Missing 'timestamp' in _meta"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    assert isinstance(data["summary"], dict)
    assert isinstance(data["summary"].get("verdict"), str)


# ===========================================================================
# Project fixtures
# ===========================================================================


@pytest.fixture
def project_factory(tmp_path_factory):
    """Factory fixture for creating custom project layouts.

    Usage:
        def test_something(project_factory):
            proj = project_factory({
                "src/a.ts": "export const a = 1;",
                "src/b.ts": "import { a } from './a';",
            })

    A minimal package.json is written unless the layout provides one, so
    the directory is detected as the project root.
    """

    def _create(files):
        proj = tmp_path_factory.mktemp("project")
        if "package.json" not in files:
            (proj / "package.json").write_text('{"name": "fixture", "private": true}\n')
        for rel_path, content in files.items():
            fp = proj / rel_path
            fp.parent.mkdir(parents=True, exist_ok=True)
            fp.write_text(content, encoding="utf-8")
        return proj

    return _create
