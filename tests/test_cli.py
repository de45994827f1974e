"""End-to-end tests for the sweepp CLI (in-process via CliRunner)."""

from __future__ import annotations

import json

import pytest

from conftest import assert_json_envelope, invoke_cli, parse_json_output
from sweepp.exit_codes import EXIT_GATE_FAILURE, EXIT_USAGE

APP = {
    "src/a.ts": "import { x, y } from './m';\nx();\n",
    "src/m.ts": "export const x = 1;\nexport const y = 2;\nexport const z = 3;\n",
}


@pytest.fixture
def app(project_factory):
    return project_factory(APP)


# ===========================================================================
# Group
# ===========================================================================


class TestGroup:
    def test_help_lists_commands(self, cli_runner):
        result = invoke_cli(cli_runner, ["--help"])
        assert result.exit_code == 0
        for name in ("list", "clean", "unused-code"):
            assert name in result.output

    def test_unknown_command(self, cli_runner):
        result = invoke_cli(cli_runner, ["nope"])
        assert result.exit_code == EXIT_USAGE


# ===========================================================================
# list
# ===========================================================================


class TestList:
    def test_text(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["list"], cwd=app)
        assert result.exit_code == 0, result.output
        assert "VERDICT: 1 file(s) with 1 unused import(s)" in result.output
        assert "src/a.ts" in result.output
        assert "Unused Imports" in result.output

    def test_json(self, cli_runner, app):
        data = parse_json_output(invoke_cli(cli_runner, ["list"], cwd=app, json_mode=True), "list")
        assert_json_envelope(data, "list")
        assert data["summary"]["files_with_unused"] == 1
        assert data["summary"]["unused_imports"] == 1
        assert data["files"] == [
            {"file": "src/a.ts", "specifiers": ["y"], "removed": [{"source": "./m", "specifiers": ["y"]}]}
        ]

    def test_list_never_writes(self, cli_runner, app):
        invoke_cli(cli_runner, ["list"], cwd=app)
        assert (app / "src" / "a.ts").read_text() == APP["src/a.ts"]

    def test_nothing_found(self, cli_runner, project_factory):
        proj = project_factory({"a.ts": "import { q } from 'q';\nq();\n"})
        result = invoke_cli(cli_runner, ["list"], cwd=proj)
        assert result.exit_code == 0
        assert "no unused imports found" in result.output

    def test_fail_on_findings(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["list", "--fail-on-findings"], cwd=app)
        assert result.exit_code == EXIT_GATE_FAILURE

    def test_ext_filter(self, cli_runner, app):
        data = parse_json_output(invoke_cli(cli_runner, ["list", "--ext", "js"], cwd=app, json_mode=True))
        assert data["summary"]["files_scanned"] == 0

    def test_ignore_comma_list(self, cli_runner, app):
        data = parse_json_output(
            invoke_cli(cli_runner, ["list", "--ignore", "**/a.ts,dist"], cwd=app, json_mode=True)
        )
        assert data["files"] == []

    def test_target_subdirectory(self, cli_runner, project_factory):
        proj = project_factory({"web/src/a.ts": "import { u } from 'u';\n", "other/b.ts": "import { v } from 'v';\n"})
        data = parse_json_output(invoke_cli(cli_runner, ["list", "web"], cwd=proj, json_mode=True))
        assert [f["file"] for f in data["files"]] == ["web/src/a.ts"]


# ===========================================================================
# clean
# ===========================================================================


class TestClean:
    def test_rewrites_files(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["clean"], cwd=app)
        assert result.exit_code == 0, result.output
        assert "Files changed: 1" in result.output
        assert "Total specifiers removed: 1" in result.output
        assert (app / "src" / "a.ts").read_text() == "import { x } from './m';\nx();\n"

    def test_second_run_is_noop(self, cli_runner, app):
        invoke_cli(cli_runner, ["clean"], cwd=app)
        result = invoke_cli(cli_runner, ["clean"], cwd=app)
        assert "Files changed: 0" in result.output

    def test_dry_run(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["clean", "--dry-run"], cwd=app)
        assert "would change" in result.output
        assert (app / "src" / "a.ts").read_text() == APP["src/a.ts"]

    def test_diff(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["clean", "--diff"], cwd=app)
        assert "-import { x, y } from './m';" in result.output
        assert "+import { x } from './m';" in result.output
        assert (app / "src" / "a.ts").read_text() == APP["src/a.ts"]

    def test_check_local(self, cli_runner, project_factory):
        proj = project_factory({"src/a.ts": "import { util } from './missing';\nutil();\n"})
        invoke_cli(cli_runner, ["clean"], cwd=proj)
        assert (proj / "src" / "a.ts").read_text() == "import { util } from './missing';\nutil();\n"
        result = invoke_cli(cli_runner, ["clean", "--check-local"], cwd=proj)
        assert result.exit_code == 0
        assert (proj / "src" / "a.ts").read_text() == "util();\n"

    def test_check_local_from_config(self, cli_runner, project_factory):
        proj = project_factory({
            ".sweepprc.json": json.dumps({"checkLocal": True}),
            "src/a.ts": "import { util } from './missing';\nutil();\n",
        })
        invoke_cli(cli_runner, ["clean"], cwd=proj)
        assert (proj / "src" / "a.ts").read_text() == "util();\n"

    def test_json(self, cli_runner, app):
        data = parse_json_output(invoke_cli(cli_runner, ["clean", "--dry-run"], cwd=app, json_mode=True), "clean")
        assert_json_envelope(data, "clean")
        assert data["summary"]["dry_run"] is True
        assert data["summary"]["files_changed"] == 1
        assert data["files"][0]["file"] == "src/a.ts"

    def test_parse_failure_reported_not_fatal(self, cli_runner, project_factory):
        proj = project_factory({"bad.ts": "import { a } from 'a';\nconst = ;\n", "ok.ts": "import { b } from 'b';\n"})
        result = invoke_cli(cli_runner, ["clean"], cwd=proj)
        assert result.exit_code == 0
        assert "[sweepp]" in result.stderr
        assert "bad.ts" in result.stderr
        assert (proj / "ok.ts").read_text() == ""


# ===========================================================================
# unused-code
# ===========================================================================


class TestUnusedCode:
    def test_text(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["unused-code"], cwd=app)
        assert result.exit_code == 0, result.output
        assert "src/m.ts:3 z variable exported" in result.output
        assert "Summary: 1 unused code candidate(s)" in result.output
        assert "Heuristic" in result.output

    def test_json(self, cli_runner, app):
        data = parse_json_output(invoke_cli(cli_runner, ["unused-code"], cwd=app, json_mode=True), "unused-code")
        assert_json_envelope(data, "unused-code")
        assert data["items"] == [
            {"file": "src/m.ts", "name": "z", "kind": "variable", "exported": True, "start_line": 3, "end_line": 3}
        ]

    @pytest.mark.parametrize("alias", ["dead", "unuse"])
    def test_aliases(self, cli_runner, app, alias):
        data = parse_json_output(invoke_cli(cli_runner, [alias], cwd=app, json_mode=True))
        assert data["command"] == "unused-code"
        assert [i["name"] for i in data["items"]] == ["z"]

    def test_fail_on_findings(self, cli_runner, app):
        result = invoke_cli(cli_runner, ["unused-code", "--fail-on-findings"], cwd=app)
        assert result.exit_code == EXIT_GATE_FAILURE

    def test_clean_project_passes_gate(self, cli_runner, project_factory):
        proj = project_factory({"src/a.ts": "export const a = 1;\n", "src/b.ts": "import { a } from './a';\na;\n"})
        result = invoke_cli(cli_runner, ["unused-code", "--fail-on-findings"], cwd=proj)
        assert result.exit_code == 0
        assert "no unused code candidates found" in result.output

    def test_build_dirs_and_framework_files_skipped(self, cli_runner, project_factory):
        proj = project_factory({
            "dist/bundle.js": "function dead() {}\n",
            "src/pages/_app.tsx": "function helper() {}\nexport default function App() { return null; }\n",
            "src/lib.ts": "const lonely = 1;\n",
        })
        data = parse_json_output(invoke_cli(cli_runner, ["unused-code"], cwd=proj, json_mode=True))
        assert [(i["file"], i["name"]) for i in data["items"]] == [("src/lib.ts", "lonely")]

    def test_route_dirs_config(self, cli_runner, project_factory):
        proj = project_factory({
            ".sweepprc.json": json.dumps({"routeDirs": ["screens"]}),
            "src/screens/Home.tsx": "export default function Home() { return null; }\n",
        })
        data = parse_json_output(invoke_cli(cli_runner, ["unused-code"], cwd=proj, json_mode=True))
        assert data["items"] == []

    def test_monorepo_notice(self, cli_runner, project_factory):
        proj = project_factory({
            "package.json": json.dumps({"name": "root", "workspaces": ["packages/*"]}),
            "packages/ui/package.json": json.dumps({"name": "@acme/ui"}),
            "packages/ui/src/index.ts": "export const Button = 1;\n",
            "apps/web/main.ts": "import { Button } from '@acme/ui';\nButton;\n",
        })
        result = invoke_cli(cli_runner, ["unused-code"], cwd=proj)
        assert "Detected npm monorepo with 1 package(s)" in result.stderr
        assert "no unused code candidates found" in result.stdout


# ===========================================================================
# Configuration errors
# ===========================================================================


class TestConfigErrors:
    def test_malformed_config_exits_with_usage_code(self, cli_runner, project_factory):
        proj = project_factory({".sweepprc.json": "{ nope", "a.ts": ""})
        result = invoke_cli(cli_runner, ["list"], cwd=proj)
        assert result.exit_code == EXIT_USAGE
        assert "invalid config" in result.stderr
