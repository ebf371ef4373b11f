"""Customer tiers from the billing system."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.errors import AdapterUnavailable
from propsync.domain.model import SourceKind

from .http import fetch_records
from .schema import BillingCustomers

if TYPE_CHECKING:
    from propsync.config.sources import BillingConfig
    from propsync.domain.model import DesiredState, PropertyValue

    from .http import ClientFactory

log = getLogger(__name__)

CUSTOMER_TIER_PROPERTY = "customer_tier"
CUSTOMERS_PATH = "/api/customers"


class BillingSource:
    source_id = SourceKind.BILLING.value
    kind = SourceKind.BILLING
    properties = (CUSTOMER_TIER_PROPERTY,)
    per_call_timeouts = False

    def __init__(
        self,
        *,
        config: BillingConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory

    async def fetch(self, property_name: str) -> DesiredState:
        if property_name not in self.properties:
            raise AdapterUnavailable(self.source_id, f"does not provide {property_name!r}")

        customers = await fetch_records(
            source_id=self.source_id,
            resilience=self._config.resilience,
            path=CUSTOMERS_PATH,
            records=BillingCustomers,
            client_factory=self._client_factory,
        )
        tiers: dict[str, PropertyValue] = {}
        for customer in customers:
            # a record without a tier field has no opinion; an explicit null clears
            if "tier" not in customer.model_fields_set:
                continue
            tiers[customer.repository] = customer.tier
        log.info("  Found %d customer tier records", len(tiers))
        return tiers
