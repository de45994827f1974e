"""Standardized CLI exit codes for sweepp.

Exit code scheme:

    0  SUCCESS        -- command completed (findings are informational)
    1  GENERAL_ERROR  -- unexpected failure, crash, unhandled exception
    2  USAGE_ERROR    -- invalid arguments, bad flags, malformed project config
    5  GATE_FAILURE   -- findings reported while --fail-on-findings is set

CI jobs can tell "unused code found" (5) apart from "tool crashed" (1).
"""

from __future__ import annotations

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_GATE_FAILURE: int = 5

DESCRIPTIONS: dict[int, str] = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "invalid usage (bad arguments, flags or project config)",
    EXIT_GATE_FAILURE: "findings reported (--fail-on-findings)",
}

# ---------------------------------------------------------------------------
# Custom exceptions (caught by click's error handler)
# ---------------------------------------------------------------------------


class SweepError(click.ClickException):
    """Base class for sweepp errors that terminate the command."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


class ConfigError(SweepError):
    """Raised when the project configuration cannot be used."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_USAGE)


class GateFailureError(SweepError):
    """Raised when findings exist and the caller asked to fail on them."""

    def __init__(self, message: str = "Findings reported."):
        super().__init__(message, EXIT_GATE_FAILURE)
