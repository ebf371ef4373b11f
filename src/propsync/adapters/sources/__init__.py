"""Source adapters for the systems of record, and their registry."""

from __future__ import annotations

from .billing import CUSTOMER_TIER_PROPERTY, BillingSource
from .cmdb import BILLING_ACCOUNT_PROPERTY, SECURITY_CONTACT_PROPERTY, CmdbSource
from .ldap import TEAM_OWNER_PROPERTY, LdapTeamsSource
from .registry import ALL, SourceRegistration, SourceRegistry, SourceSelection

__all__ = [
    "ALL",
    "BILLING_ACCOUNT_PROPERTY",
    "CUSTOMER_TIER_PROPERTY",
    "SECURITY_CONTACT_PROPERTY",
    "TEAM_OWNER_PROPERTY",
    "BillingSource",
    "CmdbSource",
    "LdapTeamsSource",
    "SourceRegistration",
    "SourceRegistry",
    "SourceSelection",
]
