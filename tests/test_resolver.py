"""Tests for module specifier resolution and alias loading."""

from __future__ import annotations

import os

import pytest

from sweepp.errors import UnresolvedImport
from sweepp.resolve import build_resolver
from sweepp.resolve.aliases import _strip_jsonc, load_alias_table
from sweepp.resolve.paths import PathResolver, is_local_import, probe_file


def p(proj, rel):
    return os.path.normpath(str(proj / rel))


# ===========================================================================
# Predicates and probing
# ===========================================================================


class TestProbing:
    @pytest.mark.parametrize("source", ["./a", "../a", ".", "..", "/abs/path"])
    def test_local(self, source):
        assert is_local_import(source)

    @pytest.mark.parametrize("source", ["react", "@scope/pkg", ".hidden", "@/x"])
    def test_not_local(self, source):
        assert not is_local_import(source)

    def test_extension_probe(self, project_factory):
        proj = project_factory({"src/a.tsx": "", "src/b.js": ""})
        assert probe_file(str(proj / "src" / "a")) == p(proj, "src/a.tsx")
        assert probe_file(str(proj / "src" / "b")) == p(proj, "src/b.js")
        assert probe_file(str(proj / "src" / "c")) is None

    def test_index_probe(self, project_factory):
        proj = project_factory({"src/lib/index.ts": ""})
        assert probe_file(str(proj / "src" / "lib")) == p(proj, "src/lib/index.ts")

    def test_esm_js_extension_maps_to_ts(self, project_factory):
        proj = project_factory({"src/util.ts": ""})
        assert probe_file(str(proj / "src" / "util.js")) == p(proj, "src/util.ts")


# ===========================================================================
# PathResolver
# ===========================================================================


class TestPathResolver:
    def test_relative(self, project_factory):
        proj = project_factory({"src/a/b.ts": "", "src/c.ts": ""})
        resolver = PathResolver(proj)
        assert resolver.resolve("../c", str(proj / "src" / "a" / "b.ts")) == p(proj, "src/c.ts")

    def test_root_absolute(self, project_factory):
        proj = project_factory({"src/c.ts": ""})
        resolver = PathResolver(proj)
        assert resolver.resolve("/src/c", str(proj / "x.ts")) == p(proj, "src/c.ts")

    def test_unresolved(self, project_factory):
        proj = project_factory({"src/a.ts": ""})
        resolver = PathResolver(proj)
        assert resolver.resolve("./nope", str(proj / "src" / "a.ts")) is None
        with pytest.raises(UnresolvedImport) as exc:
            resolver.require("./nope", str(proj / "src" / "a.ts"))
        assert "./nope" in str(exc.value)

    def test_external_is_not_internal(self, project_factory):
        proj = project_factory({})
        resolver = build_resolver(proj)
        assert not resolver.is_internal("react")
        assert resolver.resolve("react", str(proj / "a.ts")) is None

    def test_cache_per_directory(self, project_factory):
        proj = project_factory({"src/a.ts": "", "src/x/a.ts": ""})
        resolver = PathResolver(proj)
        assert resolver.resolve("./a", str(proj / "src" / "m.ts")) == p(proj, "src/a.ts")
        assert resolver.resolve("./a", str(proj / "src" / "x" / "m.ts")) == p(proj, "src/x/a.ts")


# ===========================================================================
# Aliases
# ===========================================================================


class TestAliases:
    def test_strip_jsonc(self):
        text = '{\n  // comment\n  "a": "http://x", /* block */\n  "b": [1, 2,],\n}'
        assert _strip_jsonc(text).split() == ['{', '"a":', '"http://x",', '"b":', '[1,', '2]', '}']

    def test_tsconfig_paths(self, project_factory):
        proj = project_factory({
            "tsconfig.json": (
                "{\n"
                "  // aliases\n"
                '  "compilerOptions": {\n'
                '    "baseUrl": ".",\n'
                '    "paths": {"~/*": ["lib/*", "src/*"], "config": ["src/config/index.ts"]},\n'
                "  },\n"
                "}\n"
            ),
            "src/deep/x.ts": "",
            "src/config/index.ts": "",
        })
        resolver = build_resolver(proj)
        origin = str(proj / "src" / "main.ts")
        assert resolver.is_internal("~/deep/x")
        assert resolver.resolve("~/deep/x", origin) == p(proj, "src/deep/x.ts")
        assert resolver.resolve("config", origin) == p(proj, "src/config/index.ts")

    def test_extends_chain(self, project_factory):
        proj = project_factory({
            "tsconfig.base.json": '{"compilerOptions": {"baseUrl": "./", "paths": {"#/*": ["src/*"]}}}',
            "tsconfig.json": '{"extends": "./tsconfig.base.json", "compilerOptions": {"strict": true}}',
            "src/k.ts": "",
        })
        resolver = build_resolver(proj)
        assert resolver.resolve("#/k", str(proj / "a.ts")) == p(proj, "src/k.ts")

    def test_base_url_bare_path(self, project_factory):
        proj = project_factory({
            "jsconfig.json": '{"compilerOptions": {"baseUrl": "src"}}',
            "src/components/Nav.jsx": "",
        })
        resolver = build_resolver(proj)
        assert resolver.is_internal("components/Nav")
        assert resolver.resolve("components/Nav", str(proj / "src" / "a.js")) == p(proj, "src/components/Nav.jsx")

    def test_default_at_alias_when_src_exists(self, project_factory):
        proj = project_factory({"src/x.ts": ""})
        table = load_alias_table(proj)
        assert table.matches("@/x")
        assert table.candidates("@/x") == [os.path.join(str(proj), "src", "x")]

    def test_no_default_alias_without_src(self, project_factory):
        proj = project_factory({"lib/x.ts": ""})
        assert not load_alias_table(proj).matches("@/x")

    def test_longest_prefix_first(self, project_factory):
        proj = project_factory({
            "tsconfig.json": '{"compilerOptions": {"paths": {"@/*": ["a/*"], "@/ui/*": ["ui/*"]}}}',
        })
        table = load_alias_table(proj)
        assert table.candidates("@/ui/btn")[0] == os.path.join(str(proj), "ui", "btn")

    def test_malformed_tsconfig_ignored(self, project_factory, caplog):
        proj = project_factory({"tsconfig.json": "{ not json", "src/x.ts": ""})
        table = load_alias_table(proj)
        assert table.base_url is None
        assert "tsconfig.json" in caplog.text
