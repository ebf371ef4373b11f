from __future__ import annotations

from pathlib import Path

import pytest

from propsync.config import (
    DEFAULT_GITHUB_ORG,
    ConfigurationError,
    MissingConfigurationError,
    RunConfig,
    get_billing_config,
    get_github_config,
    get_ldap_config,
    get_run_config,
    get_storage_config,
)


def test_github_config_requires_token() -> None:
    with pytest.raises(MissingConfigurationError, match="GITHUB_TOKEN"):
        get_github_config()


def test_github_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", " ghp_secret ")

    config = get_github_config()

    assert config.organization == DEFAULT_GITHUB_ORG == "your-org"
    assert config.resilience.base_url == "https://api.github.com"
    headers = dict(config.resilience.default_headers or {})
    assert headers["Authorization"] == "Bearer ghp_secret"
    assert headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_github_config_reads_organization_and_api_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
    monkeypatch.setenv("GITHUB_ORG", "acme")
    monkeypatch.setenv("GITHUB_API_URL", "https://github.example.com/api/v3/")

    config = get_github_config()

    assert config.organization == "acme"
    assert config.resilience.base_url == "https://github.example.com/api/v3"


def test_billing_config_adds_bearer_token_when_present(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BILLING_API_URL", "https://billing.example.com/")
    monkeypatch.setenv("BILLING_API_TOKEN", "token")

    resilience = get_billing_config().resilience

    assert resilience.base_url == "https://billing.example.com"
    assert dict(resilience.default_headers or {})["Authorization"] == "Bearer token"


def test_ldap_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LDAP_SERVER_URI", "ldaps://ldap.example.com")

    with pytest.raises(MissingConfigurationError, match="LDAP_BIND_DN, LDAP_BIND_PASSWORD"):
        get_ldap_config()


def test_ldap_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LDAP_SERVER_URI", "ldaps://ldap.example.com")
    monkeypatch.setenv("LDAP_BIND_DN", "cn=propsync")
    monkeypatch.setenv("LDAP_BIND_PASSWORD", "secret")

    config = get_ldap_config()

    assert config.teams_base_dn == "ou=teams,dc=company,dc=com"
    assert config.repository_attribute == "githubRepository"


def test_run_config_rejects_invalid_limits() -> None:
    with pytest.raises(ConfigurationError, match="max_concurrency"):
        RunConfig(organization="acme", max_concurrency=0)
    with pytest.raises(ConfigurationError, match="call timeout"):
        RunConfig(organization="acme", call_timeout_seconds=0)


def test_run_config_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPSYNC_MAX_CONCURRENCY", "3")
    monkeypatch.setenv("PROPSYNC_CALL_TIMEOUT", "12.5")

    from_env = get_run_config(organization="acme")
    explicit = get_run_config(organization="acme", max_concurrency=5, call_timeout_seconds=2.0)

    assert (from_env.max_concurrency, from_env.call_timeout_seconds) == (3, 12.5)
    assert (explicit.max_concurrency, explicit.call_timeout_seconds) == (5, 2.0)


def test_run_config_defaults() -> None:
    config = get_run_config(organization="acme")

    assert config.max_concurrency == 8
    assert config.call_timeout_seconds == 30.0
    assert config.dry_run is False


def test_storage_config_honours_overrides(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PROPSYNC_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PROPSYNC_REPORT_DIR", str(tmp_path / "reports"))

    storage = get_storage_config()

    assert storage.report_dir == tmp_path / "reports"
    assert storage.audit_database_uri() == f"sqlite+pysqlite:///{tmp_path / 'data' / 'audit.db'}"
    assert (tmp_path / "data").is_dir()

    monkeypatch.setenv("PROPSYNC_AUDIT_DATABASE_URI", "sqlite+pysqlite:///:memory:")
    assert storage.audit_database_uri() == "sqlite+pysqlite:///:memory:"


def test_storage_config_reports_to_working_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)

    assert get_storage_config().report_dir == tmp_path
