"""Tests for exit codes and CLI-level exceptions."""

from __future__ import annotations

import click

from sweepp.errors import AnalysisError, ParseFailure, UnreadableFile, UnresolvedImport
from sweepp.exit_codes import (
    DESCRIPTIONS,
    EXIT_ERROR,
    EXIT_GATE_FAILURE,
    EXIT_SUCCESS,
    EXIT_USAGE,
    ConfigError,
    GateFailureError,
    SweepError,
)


def test_codes_are_distinct_and_described():
    codes = [EXIT_SUCCESS, EXIT_ERROR, EXIT_USAGE, EXIT_GATE_FAILURE]
    assert len(set(codes)) == len(codes)
    assert set(DESCRIPTIONS) == set(codes)


def test_sweep_error_is_click_exception():
    err = SweepError("boom")
    assert isinstance(err, click.ClickException)
    assert err.exit_code == EXIT_ERROR
    assert err.format_message() == "boom"


def test_config_and_gate_errors():
    assert ConfigError("bad").exit_code == EXIT_USAGE
    gate = GateFailureError()
    assert gate.exit_code == EXIT_GATE_FAILURE
    assert gate.format_message() == "Findings reported."


def test_analysis_errors_carry_path():
    for cls in (ParseFailure, UnreadableFile):
        err = cls("src/a.ts", "detail")
        assert isinstance(err, AnalysisError)
        assert err.path == "src/a.ts"
        assert str(err) == "src/a.ts: detail"
    unresolved = UnresolvedImport("src/a.ts", "./gone")
    assert unresolved.source_module == "./gone"
    assert str(unresolved) == "src/a.ts: cannot resolve './gone'"
