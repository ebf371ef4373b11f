"""GitHub custom-properties client implementing the remote state port."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from propsync.adapters.http_resilience import default_client_factory, describe_http_error
from propsync.domain.errors import EntityReadError, EntityWriteError, RemoteUnavailable

from .schema import (
    CustomPropertyUpdate,
    CustomPropertyUpdateRequest,
    CustomPropertyValues,
    RepositoryPage,
    TeamPage,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from propsync.adapters.http_resilience import ResilientClient
    from propsync.config.github import GitHubConfig
    from propsync.config.http_resilience import ResilienceConfig
    from propsync.domain.model import PropertyValue

log = getLogger(__name__)

REPOSITORIES_PER_PAGE = 100
TEAMS_PER_PAGE = 10


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API answers with an unexpected payload."""


class GitHubPropertiesClient:
    """Read and write repository custom properties for one organisation.

    The underlying HTTP client is created on first use and shared by every call
    of the run; close it with :meth:`aclose` or use the client as an async
    context manager. The repository listing is fetched once per client and
    reused, so a run enumerates the organisation a single time.
    """

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or default_client_factory
        self._http: ResilientClient | None = None
        self._repositories: list[str] | None = None
        self._listing_lock = asyncio.Lock()

    @property
    def organization(self) -> str:
        return self._config.organization

    async def __aenter__(self) -> GitHubPropertiesClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def list_entities(self) -> list[str]:
        """Names of all non-archived repositories, following pagination links."""

        async with self._listing_lock:
            if self._repositories is None:
                self._repositories = await self._list_repositories()
        return list(self._repositories)

    async def _list_repositories(self) -> list[str]:
        names: list[str] = []
        url: str | None = f"/orgs/{self.organization}/repos"
        params: dict[str, str | int] | None = {"per_page": REPOSITORIES_PER_PAGE, "type": "all"}
        try:
            while url is not None:
                response = await self._client().get(url, params=params)
                response.raise_for_status()
                page = RepositoryPage.validate_python(response.json())
                names.extend(repo.name for repo in page if not repo.archived)
                url = _next_link(response)
                # the next link already carries the query string
                params = None
        except httpx.HTTPError as exc:
            raise RemoteUnavailable(
                f"Could not list repositories for {self.organization}: "
                f"{describe_http_error(exc)}"
            ) from exc
        except (ValidationError, ValueError) as exc:
            raise RemoteUnavailable(
                f"Unexpected repository listing payload for {self.organization}: {exc}"
            ) from exc
        return names

    async def get_value(self, entity_id: str, property_name: str) -> PropertyValue:
        try:
            payload = await self._get_json(
                f"/repos/{self.organization}/{_segment(entity_id)}/properties/values"
            )
            values = CustomPropertyValues.validate_python(payload)
        except httpx.HTTPError as exc:
            raise EntityReadError(entity_id, property_name, describe_http_error(exc)) from exc
        except (ValidationError, ValueError) as exc:
            raise EntityReadError(
                entity_id, property_name, f"unexpected properties payload: {exc}"
            ) from exc

        for entry in values:
            if entry.property_name != property_name:
                continue
            if isinstance(entry.value, list):
                raise EntityReadError(
                    entity_id, property_name, "multi-select values are not supported"
                )
            return entry.value
        return None

    async def set_value(self, entity_id: str, property_name: str, value: PropertyValue) -> None:
        body = CustomPropertyUpdateRequest(
            properties=[CustomPropertyUpdate(property_name=property_name, value=value)]
        )
        try:
            response = await self._client().patch(
                f"/repos/{self.organization}/{_segment(entity_id)}/properties/values",
                json=body.model_dump(),
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EntityWriteError(entity_id, property_name, describe_http_error(exc)) from exc

    async def list_repository_teams(self, repository: str) -> list[str]:
        """Slugs of the teams with access to ``repository``, in API order."""

        payload = await self._get_json(
            f"/repos/{self.organization}/{_segment(repository)}/teams",
            params={"per_page": TEAMS_PER_PAGE},
        )
        try:
            teams = TeamPage.validate_python(payload)
        except ValidationError as exc:
            raise GitHubAPIError(f"Unexpected teams payload for {repository}") from exc
        return [team.slug for team in teams]

    async def _get_json(
        self, path: str, *, params: dict[str, str | int] | None = None
    ) -> Any:
        response = await self._client().get(path, params=params)
        response.raise_for_status()
        return response.json()

    def _client(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._config.resilience)
        return self._http


def _segment(name: str) -> str:
    return quote(name, safe="")


def _next_link(response: httpx.Response) -> str | None:
    next_link = response.links.get("next")
    if not next_link:
        return None
    return next_link.get("url")
