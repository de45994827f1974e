"""sweepp: sweep unused imports and dead code from JS/TS projects."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sweepp")
except PackageNotFoundError:
    __version__ = "dev"
