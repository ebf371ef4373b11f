"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.adapters.github import GitHubPropertiesClient, ManagedPlatformTeamsSource
from propsync.adapters.report_file import JsonReportWriter
from propsync.adapters.sources import (
    ALL,
    BillingSource,
    CmdbSource,
    LdapTeamsSource,
    SourceRegistration,
    SourceRegistry,
)
from propsync.adapters.sqlalchemy import SqlAlchemyAuditStore
from propsync.config import (
    get_billing_config,
    get_cmdb_config,
    get_github_config,
    get_ldap_config,
    get_run_config,
    get_storage_config,
)
from propsync.domain.model import SourceKind
from propsync.domain.reconciliation import Reconciler
from propsync.domain.reporting import ReportEmitter

if TYPE_CHECKING:
    from pathlib import Path

    from propsync.adapters.http_resilience import ResilientClient
    from propsync.config import GitHubConfig, ResilienceConfig, RunConfig, StorageConfig
    from propsync.domain.model import RunResult
    from propsync.domain.ports import ReportSink

RegistryFactory = Callable[[GitHubPropertiesClient, "RunConfig"], SourceRegistry]

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncRequest:
    """What the operator asked for on the command line."""

    source: str = ALL
    property_name: str = ALL
    dry_run: bool = False
    verbose: bool = False
    max_concurrency: int | None = None
    call_timeout_seconds: float | None = None
    report_dir: Path | None = None
    audit: bool = True


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    result: RunResult
    report_path: str | None


def build_source_registry(
    github_client: GitHubPropertiesClient,
    run_config: RunConfig,
) -> SourceRegistry:
    """Register the known sources in invocation order.

    ``managed-platform-teams`` precedes ``ldap`` so LDAP wins ``team_owner``
    conflicts. ``cmdb`` only runs when requested explicitly.
    """

    registry = SourceRegistry()
    registry.register(
        SourceRegistration(
            kind=SourceKind.BILLING,
            properties=BillingSource.properties,
            factory=lambda: BillingSource(config=get_billing_config()),
            aliases=("billing-api",),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.MANAGED_PLATFORM_TEAMS,
            properties=ManagedPlatformTeamsSource.properties,
            factory=lambda: ManagedPlatformTeamsSource(
                client=github_client,
                verbose=run_config.verbose,
                max_concurrency=run_config.max_concurrency,
            ),
            aliases=("github-teams",),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.LDAP,
            properties=LdapTeamsSource.properties,
            factory=lambda: LdapTeamsSource(config=get_ldap_config()),
        )
    )
    registry.register(
        SourceRegistration(
            kind=SourceKind.CMDB,
            properties=CmdbSource.properties,
            factory=lambda: CmdbSource(config=get_cmdb_config()),
            in_all=False,
        )
    )
    return registry


def sync_properties(
    request: SyncRequest,
    *,
    github_config: GitHubConfig | None = None,
    storage: StorageConfig | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    registry_factory: RegistryFactory | None = None,
) -> SyncOutcome:
    """Reconcile the requested properties and emit the run report.

    Raises ``ConfigurationError`` for missing credentials or an invalid selection
    and ``RemoteUnavailable`` when the repositories cannot be enumerated.
    """

    effective_github = github_config or get_github_config()
    effective_storage = storage or get_storage_config()
    run_config = get_run_config(
        organization=effective_github.organization,
        dry_run=request.dry_run,
        verbose=request.verbose,
        max_concurrency=request.max_concurrency,
        call_timeout_seconds=request.call_timeout_seconds,
    )
    # every GitHub request, including per-repository team lookups, gets the call timeout
    effective_github = replace(
        effective_github,
        resilience=replace(
            effective_github.resilience, timeout_seconds=run_config.call_timeout_seconds
        ),
    )

    log.info("Organization: %s", run_config.organization)
    log.info("Source: %s", request.source)
    log.info("Property: %s", request.property_name)
    log.info("Mode: %s", "DRY-RUN (no changes)" if run_config.dry_run else "LIVE (will update)")

    sinks: list[ReportSink] = [
        JsonReportWriter(request.report_dir or effective_storage.report_dir)
    ]
    audit_store: SqlAlchemyAuditStore | None = None
    if request.audit:
        audit_store = SqlAlchemyAuditStore.from_uri(effective_storage.audit_database_uri())
        sinks.append(audit_store)

    try:
        return asyncio.run(
            _sync_properties_async(
                request,
                github_config=effective_github,
                run_config=run_config,
                emitter=ReportEmitter(sinks),
                client_factory=client_factory,
                registry_factory=registry_factory or build_source_registry,
            )
        )
    finally:
        if audit_store is not None:
            audit_store.dispose()


async def _sync_properties_async(
    request: SyncRequest,
    *,
    github_config: GitHubConfig,
    run_config: RunConfig,
    emitter: ReportEmitter,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None,
    registry_factory: RegistryFactory,
) -> SyncOutcome:
    async with GitHubPropertiesClient(
        config=github_config, client_factory=client_factory
    ) as client:
        registry = registry_factory(client, run_config)
        selection = registry.select(source=request.source, property_name=request.property_name)
        reconciler = Reconciler(
            client=client,
            sources=selection.adapters,
            config=run_config,
            emitter=emitter,
        )
        result = await reconciler.reconcile(selection.specs)
        return SyncOutcome(result=result, report_path=reconciler.report_location)
