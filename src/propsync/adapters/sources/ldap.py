"""Team ownership from the LDAP / Active Directory team groups."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from ldap3 import SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException

from propsync.domain.errors import AdapterUnavailable
from propsync.domain.model import SourceKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from propsync.config.sources import LdapConfig
    from propsync.domain.model import DesiredState, PropertyValue

log = getLogger(__name__)

TEAM_OWNER_PROPERTY = "team_owner"
TEAM_GROUP_FILTER = "(objectClass=groupOfNames)"
LDAP_SUCCESS = 0


class LdapConnection(Protocol):
    """Subset of ``ldap3.Connection`` used by the source."""

    result: Any
    response: Any

    def bind(self) -> bool: ...

    def search(
        self,
        search_base: str,
        search_filter: str,
        search_scope: str = ...,
        attributes: Iterable[str] | None = ...,
    ) -> bool: ...

    def unbind(self) -> bool: ...


def _default_connection_factory(config: LdapConfig) -> LdapConnection:
    server = Server(config.server_uri, connect_timeout=int(config.timeout_seconds))
    return Connection(
        server,
        user=config.bind_dn,
        password=config.bind_password,
        read_only=True,
        receive_timeout=int(config.timeout_seconds),
    )


class LdapTeamsSource:
    """``team_owner`` from group entries listing the repositories they own.

    Every value of the configured repository attribute on a team group maps that
    repository to the group's ``cn``. When two groups claim one repository the
    group returned later wins, matching the cross-source merge rule.
    """

    source_id = SourceKind.LDAP.value
    kind = SourceKind.LDAP
    properties = (TEAM_OWNER_PROPERTY,)
    per_call_timeouts = False

    def __init__(
        self,
        *,
        config: LdapConfig,
        connection_factory: Callable[[LdapConfig], LdapConnection] | None = None,
    ) -> None:
        self._config = config
        self._connection_factory = connection_factory or _default_connection_factory

    async def fetch(self, property_name: str) -> DesiredState:
        if property_name not in self.properties:
            raise AdapterUnavailable(self.source_id, f"does not provide {property_name!r}")
        # ldap3's sync strategy blocks
        return await asyncio.to_thread(self._search_team_owners)

    def _search_team_owners(self) -> dict[str, PropertyValue]:
        connection = self._connection_factory(self._config)
        try:
            if not connection.bind():
                raise AdapterUnavailable(
                    self.source_id, f"bind failed: {_describe_result(connection.result)}"
                )
            found = connection.search(
                self._config.teams_base_dn,
                TEAM_GROUP_FILTER,
                search_scope=SUBTREE,
                attributes=["cn", self._config.repository_attribute],
            )
            if not found and _result_code(connection.result) != LDAP_SUCCESS:
                raise AdapterUnavailable(
                    self.source_id, f"search failed: {_describe_result(connection.result)}"
                )
            owners = self._owners_from_entries(connection.response or [])
        except LDAPException as exc:
            raise AdapterUnavailable(self.source_id, str(exc)) from exc
        finally:
            try:
                connection.unbind()
            except LDAPException:
                log.debug("LDAP unbind failed", exc_info=True)

        log.info("  Found %d team ownership records", len(owners))
        return owners

    def _owners_from_entries(self, entries: Iterable[dict[str, Any]]) -> dict[str, PropertyValue]:
        owners: dict[str, PropertyValue] = {}
        attribute = self._config.repository_attribute
        for entry in entries:
            if entry.get("type", "searchResEntry") != "searchResEntry":
                continue
            attributes = entry.get("attributes") or {}
            team = _first(attributes.get("cn"))
            if team is None:
                log.debug("Skipping team entry without cn: %s", entry.get("dn"))
                continue
            for repository in _values(attributes.get(attribute)):
                owners[repository] = team
        return owners


def _values(raw: object) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str | bytes):
        raw = [raw]
    if not isinstance(raw, list | tuple):
        return []
    values: list[str] = []
    for item in raw:
        text = item.decode("utf-8") if isinstance(item, bytes) else str(item)
        text = text.strip()
        if text:
            values.append(text)
    return values


def _first(raw: object) -> str | None:
    values = _values(raw)
    return values[0] if values else None


def _result_code(result: object) -> int | None:
    if isinstance(result, dict):
        code = result.get("result")
        return code if isinstance(code, int) else None
    return None


def _describe_result(result: object) -> str:
    if isinstance(result, dict):
        description = result.get("description") or "unknown"
        message = result.get("message")
        return f"{description} ({message})" if message else str(description)
    return "unknown"
