from __future__ import annotations

import json
import re

import pytest
from tsscctl.core import RunContext, log_event


def test_run_context_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RUN_ID", raising=False)
    monkeypatch.delenv("PROFILE", raising=False)
    ctx = RunContext.from_args(None, None)
    assert re.fullmatch(r"tssc-\d{8}-\d{6}", ctx.run_id)
    assert ctx.profile == "local"
    assert ctx.output_format == "text"


def test_run_context_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUN_ID", "env-run")
    monkeypatch.setenv("PROFILE", "ci")
    ctx = RunContext.from_args(None, None)
    assert (ctx.run_id, ctx.profile) == ("env-run", "ci")
    assert RunContext.from_args("cli-run", "dev").run_id == "cli-run"


def test_log_event_levels(capsys: pytest.CaptureFixture[str]) -> None:
    quiet = RunContext.from_args("r1", "p", quiet=True)
    log_event(quiet, "info", "config", "load")
    log_event(quiet, "debug", "config", "load")
    assert capsys.readouterr().err == ""
    log_event(quiet, "error", "cli", "failed", kind="key_not_found")
    line = capsys.readouterr().err.strip()
    assert line.endswith("level=error run_id=r1 component=cli action=failed kind=key_not_found")


def test_log_event_json_records_caller(capsys: pytest.CaptureFixture[str]) -> None:
    ctx = RunContext.from_args("r2", "p", verbose=True, log_json=True)
    log_event(ctx, "debug", "config", "override", target="Quay")
    event = json.loads(capsys.readouterr().err)
    assert event["level"] == "debug"
    assert event["target"] == "Quay"
    assert event["file"].endswith("test_run_context.py")
