"""Security contacts and billing accounts from the CMDB."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.errors import AdapterUnavailable
from propsync.domain.model import SourceKind

from .http import fetch_records
from .schema import CmdbRepositories

if TYPE_CHECKING:
    from propsync.config.sources import CmdbConfig
    from propsync.domain.model import DesiredState, PropertyValue

    from .http import ClientFactory

log = getLogger(__name__)

SECURITY_CONTACT_PROPERTY = "security_contact"
BILLING_ACCOUNT_PROPERTY = "billing_account"
REPOSITORIES_PATH = "/api/repos"


class CmdbSource:
    """One CMDB record per repository feeds two properties.

    A field missing from a record means the CMDB has no opinion; an explicit
    ``null`` clears the property.
    """

    source_id = SourceKind.CMDB.value
    kind = SourceKind.CMDB
    properties = (SECURITY_CONTACT_PROPERTY, BILLING_ACCOUNT_PROPERTY)
    per_call_timeouts = False

    def __init__(
        self,
        *,
        config: CmdbConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory

    async def fetch(self, property_name: str) -> DesiredState:
        if property_name not in self.properties:
            raise AdapterUnavailable(self.source_id, f"does not provide {property_name!r}")

        records = await fetch_records(
            source_id=self.source_id,
            resilience=self._config.resilience,
            path=REPOSITORIES_PATH,
            records=CmdbRepositories,
            client_factory=self._client_factory,
        )
        values: dict[str, PropertyValue] = {}
        for record in records:
            if property_name not in record.model_fields_set:
                continue
            values[record.repository] = getattr(record, property_name)
        log.info("  Found %d %s records", len(values), property_name)
        return values
