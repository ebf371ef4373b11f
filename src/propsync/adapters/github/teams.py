"""Team ownership derived from the managed platform's own team assignments."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from propsync.adapters.http_resilience import describe_http_error
from propsync.domain.errors import AdapterUnavailable, RemoteUnavailable
from propsync.domain.model import SourceKind

from .client import GitHubAPIError

if TYPE_CHECKING:
    from propsync.domain.model import DesiredState

    from .client import GitHubPropertiesClient

log = getLogger(__name__)

TEAM_OWNER_PROPERTY = "team_owner"
DEFAULT_LOOKUP_CONCURRENCY = 8


class ManagedPlatformTeamsSource:
    """``team_owner`` from the first team with access to each repository.

    Repositories without any team are left out (no opinion). A failed team
    lookup for one repository only drops that repository. One fetch issues a
    request per repository, each bounded by the client's request timeout, so the
    fetch as a whole carries no deadline. The repository listing is shared with
    the reconciler through the client.
    """

    source_id = SourceKind.MANAGED_PLATFORM_TEAMS.value
    kind = SourceKind.MANAGED_PLATFORM_TEAMS
    properties = (TEAM_OWNER_PROPERTY,)
    per_call_timeouts = True

    def __init__(
        self,
        *,
        client: GitHubPropertiesClient,
        verbose: bool = False,
        max_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY,
    ) -> None:
        self._client = client
        self._verbose = verbose
        self._max_concurrency = max_concurrency

    async def fetch(self, property_name: str) -> DesiredState:
        if property_name not in self.properties:
            raise AdapterUnavailable(self.source_id, f"does not provide {property_name!r}")

        try:
            repositories = await self._client.list_entities()
        except RemoteUnavailable as exc:
            raise AdapterUnavailable(self.source_id, str(exc)) from exc

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def first_team(repository: str) -> str | None:
            async with semaphore:
                try:
                    teams = await self._client.list_repository_teams(repository)
                except httpx.HTTPError as exc:
                    self._warn(repository, describe_http_error(exc))
                    return None
                except (GitHubAPIError, ValueError) as exc:
                    self._warn(repository, str(exc))
                    return None
            # the first team listed usually holds the highest permission
            return teams[0] if teams else None

        owners = await asyncio.gather(*(first_team(repository) for repository in repositories))
        assignments = {
            repository: owner
            for repository, owner in zip(repositories, owners, strict=True)
            if owner is not None
        }
        log.info("  Found %d team assignments", len(assignments))
        return assignments

    def _warn(self, repository: str, message: str) -> None:
        if self._verbose:
            log.warning("  Could not fetch teams for %s: %s", repository, message)
