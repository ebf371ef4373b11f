"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int, optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .github import DEFAULT_GITHUB_ORG, GitHubConfig, get_github_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .run import RunConfig, get_run_config
from .sources import (
    BillingConfig,
    CmdbConfig,
    LdapConfig,
    get_billing_config,
    get_cmdb_config,
    get_ldap_config,
)
from .storage import StorageConfig, get_storage_config

__all__ = [
    "DEFAULT_GITHUB_ORG",
    "BillingConfig",
    "CmdbConfig",
    "ConfigurationError",
    "GitHubConfig",
    "LdapConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "RunConfig",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_billing_config",
    "get_cmdb_config",
    "get_github_config",
    "get_ldap_config",
    "get_run_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
