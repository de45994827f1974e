"""Project root discovery and project-level configuration.

Configuration comes from ``.sweepprc.json`` at the project root or, when
that file is absent, from the ``"sweepp"`` key of the root ``package.json``::

    {
      "ext": ["ts", "tsx"],
      "ignore": ["**/__generated__/**"],
      "checkLocal": true,
      "routeDirs": ["screens"],
      "implicitImports": ["preact"]
    }

Command-line flags override these values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path

from sweepp.exit_codes import ConfigError
from sweepp.index.discovery import DEFAULT_EXTENSIONS, normalize_extensions

CONFIG_FILE = ".sweepprc.json"
PACKAGE_KEY = "sweepp"

_ROOT_MARKERS = ("package.json", ".git")


def find_project_root(start: str = ".") -> Path:
    """Find the project root: nearest ancestor with package.json or .git."""
    current = Path(start).resolve()
    while current != current.parent:
        if any((current / marker).exists() for marker in _ROOT_MARKERS):
            return current
        current = current.parent
    return Path(start).resolve()


@dataclass
class SweepConfig:
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    ignore: list[str] = field(default_factory=list)
    check_local: bool = False
    route_dirs: list[str] = field(default_factory=list)
    implicit_imports: list[str] = field(default_factory=list)
    source: str | None = None

    def with_overrides(self, ext=None, ignore=None, check_local=None) -> "SweepConfig":
        """Copy with command-line values applied (None means "not given")."""
        updated = self
        if ext:
            updated = replace(updated, extensions=normalize_extensions(ext))
        if ignore:
            updated = replace(updated, ignore=list(updated.ignore) + list(ignore))
        if check_local is not None:
            updated = replace(updated, check_local=check_local)
        return updated


def _string_list(value, key: str, origin: str) -> list[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"{origin}: '{key}' must be a list of strings")


def _read_raw_config(project_root: Path) -> tuple[dict, str | None]:
    rc_path = project_root / CONFIG_FILE
    if rc_path.exists():
        try:
            data = json.loads(rc_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"{rc_path}: invalid config ({e})") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{rc_path}: config must be a JSON object")
        return data, str(rc_path)

    pkg_path = project_root / "package.json"
    if pkg_path.exists():
        try:
            manifest = json.loads(pkg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            # A broken package.json is the project's problem, not a config error
            return {}, None
        section = manifest.get(PACKAGE_KEY) if isinstance(manifest, dict) else None
        if section is None:
            return {}, None
        if not isinstance(section, dict):
            raise ConfigError(f"{pkg_path}: '{PACKAGE_KEY}' must be an object")
        return section, f"{pkg_path}#{PACKAGE_KEY}"
    return {}, None


def load_project_config(project_root) -> SweepConfig:
    """Load the project configuration; raise ConfigError when it is malformed."""
    data, origin = _read_raw_config(Path(project_root))
    config = SweepConfig(source=origin)
    if not data:
        return config
    if "ext" in data:
        extensions = normalize_extensions(_string_list(data["ext"], "ext", origin))
        if not extensions:
            raise ConfigError(f"{origin}: 'ext' must name at least one extension")
        config.extensions = extensions
    if "ignore" in data:
        config.ignore = _string_list(data["ignore"], "ignore", origin)
    if "checkLocal" in data:
        if not isinstance(data["checkLocal"], bool):
            raise ConfigError(f"{origin}: 'checkLocal' must be true or false")
        config.check_local = data["checkLocal"]
    if "routeDirs" in data:
        config.route_dirs = _string_list(data["routeDirs"], "routeDirs", origin)
    if "implicitImports" in data:
        config.implicit_imports = _string_list(data["implicitImports"], "implicitImports", origin)
    return config
