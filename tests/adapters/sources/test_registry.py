from __future__ import annotations

import pytest

from propsync.adapters.sources import (
    ALL,
    BillingSource,
    CmdbSource,
    LdapTeamsSource,
    SourceRegistration,
    SourceRegistry,
)
from propsync.app import build_source_registry
from propsync.config import ConfigurationError, MissingConfigurationError
from propsync.config.run import RunConfig
from propsync.domain.model import PropertySpec, SourceKind
from tests.support.fakes import StaticSource


def _missing() -> StaticSource:
    raise MissingConfigurationError("Missing required environment variables: LDAP_SERVER_URI")


def _registry(*, ldap_configured: bool = True) -> SourceRegistry:
    registry = SourceRegistry()
    registry.register(
        SourceRegistration(
            kind=SourceKind.BILLING,
            properties=("customer_tier",),
            factory=lambda: StaticSource(SourceKind.BILLING, {"customer_tier": {}}),
            aliases=("billing-api",),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.MANAGED_PLATFORM_TEAMS,
            properties=("team_owner",),
            factory=lambda: StaticSource(SourceKind.MANAGED_PLATFORM_TEAMS, {"team_owner": {}}),
            aliases=("github-teams",),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.LDAP,
            properties=("team_owner",),
            factory=(
                (lambda: StaticSource(SourceKind.LDAP, {"team_owner": {}}))
                if ldap_configured
                else _missing
            ),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.CMDB,
            properties=("security_contact", "billing_account"),
            factory=lambda: StaticSource(
                SourceKind.CMDB, {"security_contact": {}, "billing_account": {}}
            ),
            in_all=False,
        )
    )
    return registry


def test_all_selects_default_sources_in_registration_order() -> None:
    selection = _registry().select()

    assert selection.specs == (
        PropertySpec(name="customer_tier", source=SourceKind.BILLING),
        PropertySpec(name="team_owner", source=SourceKind.MANAGED_PLATFORM_TEAMS),
        PropertySpec(name="team_owner", source=SourceKind.LDAP),
    )
    assert list(selection.adapters) == ["billing", "managed-platform-teams", "ldap"]
    assert selection.properties == ("customer_tier", "team_owner")


def test_explicit_source_outside_all_can_be_selected() -> None:
    selection = _registry().select(source="cmdb")

    assert [spec.name for spec in selection.specs] == ["security_contact", "billing_account"]


def test_aliases_and_case_are_accepted() -> None:
    assert list(_registry().select(source="Billing-API").adapters) == ["billing"]
    assert list(_registry().select(source="github-teams").adapters) == ["managed-platform-teams"]


def test_property_filter_keeps_every_feeding_source() -> None:
    selection = _registry().select(property_name="team_owner")

    assert [spec.source for spec in selection.specs] == [
        SourceKind.MANAGED_PLATFORM_TEAMS,
        SourceKind.LDAP,
    ]


def test_property_filter_narrows_multi_property_source() -> None:
    selection = _registry().select(source="cmdb", property_name="billing_account")

    assert selection.specs == (PropertySpec(name="billing_account", source=SourceKind.CMDB),)


@pytest.mark.parametrize(
    ("source", "property_name", "message"),
    [
        ("jira", ALL, "Unknown source 'jira'"),
        (ALL, "cost_center", "Unknown property 'cost_center'"),
        ("billing", "team_owner", "does not provide property 'team_owner'"),
    ],
)
def test_invalid_selection_is_a_configuration_error(
    source: str, property_name: str, message: str
) -> None:
    with pytest.raises(ConfigurationError, match=message):
        _registry().select(source=source, property_name=property_name)


def test_unconfigured_source_is_skipped_for_all(caplog: pytest.LogCaptureFixture) -> None:
    selection = _registry(ldap_configured=False).select()

    assert "ldap" not in selection.adapters
    assert any("Skipping source ldap" in record.getMessage() for record in caplog.records)


def test_unconfigured_source_is_fatal_when_requested() -> None:
    with pytest.raises(MissingConfigurationError):
        _registry(ldap_configured=False).select(source="ldap")


def test_selection_without_configured_sources_is_rejected() -> None:
    registry = SourceRegistry()
    registry.register(
        SourceRegistration(kind=SourceKind.LDAP, properties=("team_owner",), factory=_missing)
    )

    with pytest.raises(ConfigurationError, match="No configured source"):
        registry.select()


def test_default_registry_orders_ldap_after_platform_teams() -> None:
    registry = build_source_registry(object(), RunConfig(organization="acme"))  # type: ignore[arg-type]

    registrations = registry.all()
    assert list(registrations) == ["billing", "managed-platform-teams", "ldap", "cmdb"]
    assert registrations["cmdb"].in_all is False
    assert registrations["billing"].properties == BillingSource.properties
    assert registrations["ldap"].properties == LdapTeamsSource.properties
    assert registrations["cmdb"].properties == CmdbSource.properties
    assert registry.get("billing-api") is registrations["billing"]
    assert registry.known_properties() == (
        "customer_tier",
        "team_owner",
        "security_contact",
        "billing_account",
    )


def test_default_registry_requires_source_configuration() -> None:
    registry = build_source_registry(object(), RunConfig(organization="acme"))  # type: ignore[arg-type]

    with pytest.raises(MissingConfigurationError, match="BILLING_API_URL"):
        registry.select(source="billing")
