from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from propsync.app import SyncOutcome, SyncRequest
from propsync.config import ConfigurationError
from propsync.domain.errors import RemoteUnavailable
from propsync.domain.model import RunResult
from propsync.ui import cli as cli_module


def _outcome(*, interrupted: bool = False) -> SyncOutcome:
    moment = datetime(2024, 5, 1, tzinfo=UTC)
    result = RunResult(
        organization="acme",
        dry_run=False,
        started_at=moment,
        ended_at=moment,
        interrupted=interrupted,
    )
    return SyncOutcome(result=result, report_path="sync-results-1.json")


def _capture(monkeypatch: pytest.MonkeyPatch, outcome: SyncOutcome) -> list[SyncRequest]:
    captured: list[SyncRequest] = []

    def fake_sync(request: SyncRequest) -> SyncOutcome:
        captured.append(request)
        return outcome

    monkeypatch.setattr(cli_module, "sync_properties", fake_sync)
    return captured


def test_cli_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch, _outcome())

    cli_module.main([])

    assert captured == [SyncRequest()]


def test_cli_with_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured = _capture(monkeypatch, _outcome())

    cli_module.main(
        [
            "--source",
            "billing-api",
            "--property",
            "customer_tier",
            "--dry-run",
            "--max-concurrency",
            "3",
            "--timeout",
            "2.5",
            "--report-dir",
            str(tmp_path),
            "--no-audit",
        ]
    )

    (request,) = captured
    assert request.source == "billing-api"
    assert request.property_name == "customer_tier"
    assert request.dry_run is True
    assert request.verbose is False
    assert request.max_concurrency == 3
    assert request.call_timeout_seconds == 2.5
    assert request.report_dir == tmp_path
    assert request.audit is False


def test_cli_exits_non_zero_when_run_failed(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, _outcome(interrupted=True))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "error",
    [
        ConfigurationError("Missing configuration for: GITHUB_TOKEN"),
        RemoteUnavailable("Could not list repositories for acme: HTTP 401"),
        RuntimeError("unexpected"),
    ],
)
def test_cli_fatal_errors_exit_one(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    def fake_sync(request: SyncRequest) -> SyncOutcome:
        raise error

    monkeypatch.setattr(cli_module, "sync_properties", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 1


def test_cli_rejects_invalid_number(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, _outcome())

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--max-concurrency", "many"])

    assert excinfo.value.code == 2
