"""Configuration for the external systems of record."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

SOURCE_TIMEOUT_SECONDS = 20.0
DEFAULT_LDAP_TEAMS_BASE_DN = "ou=teams,dc=company,dc=com"
DEFAULT_LDAP_REPOSITORY_ATTRIBUTE = "githubRepository"


def _http_resilience(name: str, base_url: str, token: str | None) -> ResilienceConfig:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return ResilienceConfig(
        name=name,
        base_url=base_url.rstrip("/"),
        timeout_seconds=SOURCE_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        default_headers=headers,
    )


def _optional_secret(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True, slots=True)
class BillingConfig:
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class CmdbConfig:
    resilience: ResilienceConfig


@dataclass(frozen=True, slots=True)
class LdapConfig:
    server_uri: str
    bind_dn: str
    bind_password: str
    teams_base_dn: str = DEFAULT_LDAP_TEAMS_BASE_DN
    repository_attribute: str = DEFAULT_LDAP_REPOSITORY_ATTRIBUTE
    timeout_seconds: float = SOURCE_TIMEOUT_SECONDS


def get_billing_config() -> BillingConfig:
    values = require_env_vars(("BILLING_API_URL",))
    return BillingConfig(
        resilience=_http_resilience(
            "billing", values["BILLING_API_URL"], _optional_secret("BILLING_API_TOKEN")
        )
    )


def get_cmdb_config() -> CmdbConfig:
    values = require_env_vars(("CMDB_API_URL",))
    return CmdbConfig(
        resilience=_http_resilience(
            "cmdb", values["CMDB_API_URL"], _optional_secret("CMDB_API_TOKEN")
        )
    )


def get_ldap_config() -> LdapConfig:
    values = require_env_vars(("LDAP_SERVER_URI", "LDAP_BIND_DN", "LDAP_BIND_PASSWORD"))
    return LdapConfig(
        server_uri=values["LDAP_SERVER_URI"],
        bind_dn=values["LDAP_BIND_DN"],
        bind_password=values["LDAP_BIND_PASSWORD"],
        teams_base_dn=optional_env_var("LDAP_TEAMS_BASE_DN", DEFAULT_LDAP_TEAMS_BASE_DN),
        repository_attribute=optional_env_var(
            "LDAP_REPOSITORY_ATTRIBUTE", DEFAULT_LDAP_REPOSITORY_ATTRIBUTE
        ),
    )
