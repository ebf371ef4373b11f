from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from propsync.domain.reporting import ReportEmitter

if TYPE_CHECKING:
    from propsync.domain.model import RunResult


class _Sink:
    def __init__(self, location: str | None = None, error: Exception | None = None) -> None:
        self.location = location
        self.error = error
        self.results: list[RunResult] = []

    def write(self, result: RunResult) -> str | None:
        self.results.append(result)
        if self.error is not None:
            raise self.error
        return self.location


def test_emit_returns_primary_location(sample_result: RunResult) -> None:
    primary = _Sink(location="/reports/sync-results-1.json")
    audit = _Sink()

    location = ReportEmitter([primary, audit]).emit(sample_result)

    assert location == "/reports/sync-results-1.json"
    assert primary.results == [sample_result]
    assert audit.results == [sample_result]


def test_primary_sink_failure_propagates(sample_result: RunResult) -> None:
    audit = _Sink()
    emitter = ReportEmitter([_Sink(error=OSError("disk full")), audit])

    with pytest.raises(OSError, match="disk full"):
        emitter.emit(sample_result)

    assert audit.results == []


def test_audit_sink_failure_is_logged(
    sample_result: RunResult, caplog: pytest.LogCaptureFixture
) -> None:
    emitter = ReportEmitter([_Sink(location="report.json"), _Sink(error=RuntimeError("locked"))])

    with caplog.at_level(logging.ERROR, logger="propsync"):
        location = emitter.emit(sample_result)

    assert location == "report.json"
    assert any("Audit sink _Sink failed" in record.getMessage() for record in caplog.records)


def test_summary_is_logged(sample_result: RunResult, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="propsync"):
        ReportEmitter([]).emit(replace(sample_result, dry_run=True))

    messages = [record.getMessage() for record in caplog.records]
    assert "SYNC COMPLETE" in messages
    assert "Duration: 3.50s" in messages
    assert "Total updates: 1" in messages
    assert "Total errors: 1" in messages
    assert "Property team_owner failed: ldap: bind failed: invalidCredentials" in messages
    assert any(message.startswith("DRY-RUN MODE") for message in messages)


def test_interrupted_summary(sample_result: RunResult, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="propsync"):
        location = ReportEmitter([]).emit(replace(sample_result, interrupted=True))

    assert location is None
    assert "SYNC INTERRUPTED" in [record.getMessage() for record in caplog.records]
