"""GitHub API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_ORG = "your-org"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Holds GitHub API configuration values."""

    token: str
    organization: str
    resilience: ResilienceConfig


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    values = require_env_vars(("GITHUB_TOKEN",))
    token = values["GITHUB_TOKEN"].strip()
    organization = optional_env_var("GITHUB_ORG", DEFAULT_GITHUB_ORG, warn=True)
    base_url = optional_env_var("GITHUB_API_URL", DEFAULT_GITHUB_API_URL).rstrip("/")

    return GitHubConfig(
        token=token,
        organization=organization,
        resilience=resilience
        or ResilienceConfig(
            name="github",
            base_url=base_url,
            timeout_seconds=GITHUB_TIMEOUT_SECONDS,
            # secondary rate limits kick in well below the hourly quota
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            default_headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        ),
    )
