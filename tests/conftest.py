from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from propsync.config.run import RunConfig
from propsync.domain.model import Diff, DiffAction, PropertyResult, RunResult, SyncError

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_ORG",
        "GITHUB_API_URL",
        "BILLING_API_URL",
        "BILLING_API_TOKEN",
        "CMDB_API_URL",
        "CMDB_API_TOKEN",
        "LDAP_SERVER_URI",
        "LDAP_BIND_DN",
        "LDAP_BIND_PASSWORD",
        "LDAP_TEAMS_BASE_DN",
        "LDAP_REPOSITORY_ATTRIBUTE",
        "PROPSYNC_MAX_CONCURRENCY",
        "PROPSYNC_CALL_TIMEOUT",
        "PROPSYNC_DATA_DIR",
        "PROPSYNC_REPORT_DIR",
        "PROPSYNC_AUDIT_DATABASE_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def run_config() -> RunConfig:
    return RunConfig(organization="acme", max_concurrency=4, call_timeout_seconds=1.0)


@pytest.fixture
def sample_result() -> RunResult:
    return RunResult(
        organization="acme",
        dry_run=False,
        started_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        ended_at=datetime(2024, 5, 1, 12, 0, 3, 500000, tzinfo=UTC),
        sources=(
            PropertyResult(
                property="customer_tier",
                adapters=("billing",),
                updates=(
                    Diff(
                        entity_id="repo-a",
                        property="customer_tier",
                        old_value="professional",
                        new_value="enterprise",
                        action=DiffAction.UPDATE,
                    ),
                ),
                errors=(
                    SyncError(entity_id="repo-c", property="customer_tier", message="HTTP 404"),
                ),
            ),
            PropertyResult(
                property="team_owner",
                adapters=("ldap",),
                failure="ldap: bind failed: invalidCredentials",
            ),
        ),
    )
