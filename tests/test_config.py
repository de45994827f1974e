"""Tests for project root discovery and project configuration."""

from __future__ import annotations

import json

import pytest

from sweepp.config import SweepConfig, find_project_root, load_project_config
from sweepp.exit_codes import EXIT_USAGE, ConfigError


class TestFindProjectRoot:
    def test_nearest_package_json(self, project_factory):
        proj = project_factory({"packages/a/package.json": "{}", "packages/a/src/x.ts": ""})
        assert find_project_root(str(proj / "packages" / "a" / "src")) == (proj / "packages" / "a").resolve()

    def test_git_marker(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / "sub").mkdir()
        assert find_project_root(str(tmp_path / "sub")) == tmp_path.resolve()


class TestLoadProjectConfig:
    def test_defaults(self, project_factory):
        config = load_project_config(project_factory({}))
        assert config.extensions == (".ts", ".tsx", ".js", ".jsx")
        assert config.ignore == []
        assert config.check_local is False
        assert config.source is None

    def test_rc_file(self, project_factory):
        proj = project_factory({
            ".sweepprc.json": json.dumps({
                "ext": "ts,tsx",
                "ignore": ["**/gen/**"],
                "checkLocal": True,
                "routeDirs": ["screens"],
                "implicitImports": ["preact"],
            })
        })
        config = load_project_config(proj)
        assert config.extensions == (".ts", ".tsx")
        assert config.ignore == ["**/gen/**"]
        assert config.check_local is True
        assert config.route_dirs == ["screens"]
        assert config.implicit_imports == ["preact"]
        assert config.source.endswith(".sweepprc.json")

    def test_package_json_section(self, project_factory):
        proj = project_factory({"package.json": json.dumps({"name": "x", "sweepp": {"ext": ["js"]}})})
        config = load_project_config(proj)
        assert config.extensions == (".js",)
        assert config.source.endswith("package.json#sweepp")

    def test_rc_file_wins_over_package_json(self, project_factory):
        proj = project_factory({
            "package.json": json.dumps({"sweepp": {"ext": ["js"]}}),
            ".sweepprc.json": json.dumps({"ext": ["ts"]}),
        })
        assert load_project_config(proj).extensions == (".ts",)

    @pytest.mark.parametrize(
        "content",
        [
            "{ not json",
            "[1, 2]",
            json.dumps({"ext": 3}),
            json.dumps({"ext": []}),
            json.dumps({"checkLocal": "yes"}),
            json.dumps({"ignore": [1]}),
        ],
    )
    def test_malformed(self, project_factory, content):
        proj = project_factory({".sweepprc.json": content})
        with pytest.raises(ConfigError) as exc:
            load_project_config(proj)
        assert exc.value.exit_code == EXIT_USAGE

    def test_broken_package_json_is_ignored(self, project_factory):
        proj = project_factory({"package.json": "{ oops"})
        assert load_project_config(proj).source is None


class TestOverrides:
    def test_cli_values_override(self):
        base = SweepConfig(ignore=["a"], check_local=True)
        updated = base.with_overrides(ext="jsx", ignore=["b"], check_local=False)
        assert updated.extensions == (".jsx",)
        assert updated.ignore == ["a", "b"]
        assert updated.check_local is False
        assert base.ignore == ["a"]

    def test_none_means_not_given(self):
        base = SweepConfig(check_local=True)
        assert base.with_overrides().check_local is True
