"""Click CLI entry point with lazy-loaded subcommands."""

import logging
import os
import sys

# Fix Unicode output on Windows consoles (cp1253, cp1252, etc.)
if sys.platform == "win32" and not os.environ.get("PYTHONIOENCODING"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click


# Lazy-loading command group: imports command modules only when invoked.
# This avoids importing tree-sitter and networkx for --help / --version.
_COMMANDS = {
    "list":        ("sweepp.commands.cmd_list",        "list_cmd"),
    "clean":       ("sweepp.commands.cmd_clean",       "clean"),
    "unused-code": ("sweepp.commands.cmd_unused_code", "unused_code"),
}

_ALIASES = {
    "dead":  "unused-code",
    "unuse": "unused-code",
}

_LEVEL_COLORS = {
    logging.DEBUG: "bright_black",
    logging.INFO: None,
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        cmd_name = _ALIASES.get(cmd_name, cmd_name)
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)

    def resolve_command(self, ctx, args):
        # Report the canonical name so aliases show up as `unused-code` in help/errors
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd is not None else None), cmd, rest


class ClickEchoHandler(logging.Handler):
    """Log records to stderr through click, prefixed and coloured by level."""

    def emit(self, record):
        try:
            msg = self.format(record)
            click.echo(click.style(f"[sweepp] {msg}", fg=_LEVEL_COLORS.get(record.levelno)), err=True)
        except Exception:
            self.handleError(record)


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("sweepp")
    for handler in list(logger.handlers):
        if isinstance(handler, ClickEchoHandler):
            logger.removeHandler(handler)
    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group(cls=LazyGroup)
@click.version_option(package_name="sweepp")
@click.option('--json', 'json_mode', is_flag=True, help='Output in JSON format')
@click.option('-v', '--verbose', is_flag=True, help='Log resolution misses and timings')
@click.pass_context
def cli(ctx, json_mode, verbose):
    """sweepp: sweep unused imports and code from JS/TS projects."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_mode
    ctx.obj['verbose'] = verbose
    _configure_logging(verbose)
