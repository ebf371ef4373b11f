"""Pydantic models for the payloads of the internal systems of record."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SourceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BillingCustomer(SourceBaseModel):
    repository: str = Field(alias="repo")
    tier: str | None = Field(default=None, alias="customer_tier")

    _normalize_tier = field_validator("tier", mode="before")(_blank_to_none)


class CmdbRepository(SourceBaseModel):
    repository: str = Field(alias="repo")
    security_contact: str | None = None
    billing_account: str | None = None

    _normalize_contact = field_validator("security_contact", mode="before")(_blank_to_none)
    _normalize_account = field_validator("billing_account", mode="before")(_blank_to_none)


BillingCustomers = TypeAdapter(list[BillingCustomer])
CmdbRepositories = TypeAdapter(list[CmdbRepository])
