"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .client import GitHubAPIError, GitHubPropertiesClient
from .teams import ManagedPlatformTeamsSource

__all__ = ["GitHubAPIError", "GitHubPropertiesClient", "ManagedPlatformTeamsSource"]
