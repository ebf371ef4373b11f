"""Drive one property sync run from desired state to remote writes.

A run moves through ``RunPhase`` in order: desired state is fetched from every
selected source, the managed entities are enumerated once, every (entity,
property) pair is diffed and written (or only logged in dry-run mode), and the
collected ``RunResult`` is handed to the report emitter.

Failure scopes:

- an ``AdapterUnavailable`` marks that property as failed and skips it;
- ``RemoteUnavailable`` from enumeration aborts the run;
- read/write failures become ``SyncError`` records for that pair only.

Per-entity work runs concurrently under a semaphore. Result lists are sorted by
entity id before they leave the reconciler, so arrival order never shows up in
the report.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.domain.errors import (
    AdapterUnavailable,
    EntityReadError,
    EntityWriteError,
    RemoteUnavailable,
)
from propsync.domain.model import (
    DiffAction,
    PropertyResult,
    RunPhase,
    RunResult,
    SyncError,
)

from .differ import diff
from .merge import merge_desired_states, reconciliation_order

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from propsync.config.run import RunConfig
    from propsync.domain.model import Diff, PropertySpec, PropertyValue
    from propsync.domain.ports import RemoteStateClient, SourceAdapter
    from propsync.domain.reporting import ReportEmitter

log = getLogger(__name__)

WRITE_CANCELLED_MESSAGE = "write cancelled before confirmation"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _display(value: PropertyValue) -> str:
    return "(empty)" if value is None else value


@dataclass(slots=True)
class _PropertyRun:
    property: str
    adapters: list[SourceAdapter] = field(default_factory=list)
    desired: dict[str, PropertyValue] = field(default_factory=dict)
    failure: str | None = None
    updates: dict[str, Diff] = field(default_factory=dict)
    errors: dict[str, SyncError] = field(default_factory=dict)

    def to_result(self) -> PropertyResult:
        return PropertyResult(
            property=self.property,
            adapters=tuple(adapter.source_id for adapter in self.adapters),
            updates=tuple(self.updates[key] for key in sorted(self.updates)),
            errors=tuple(self.errors[key] for key in sorted(self.errors)),
            failure=self.failure,
        )


class Reconciler:
    """Reconcile selected properties against one managed organisation.

    An instance performs exactly one run.
    """

    def __init__(
        self,
        *,
        client: RemoteStateClient,
        sources: Mapping[str, SourceAdapter],
        config: RunConfig,
        emitter: ReportEmitter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._sources = sources
        self._config = config
        self._emitter = emitter
        self._clock = clock
        self._phase = RunPhase.IDLE
        self._semaphore: asyncio.Semaphore | None = None
        self.report_location: str | None = None

    @property
    def phase(self) -> RunPhase:
        return self._phase

    def run(self, selection: Sequence[PropertySpec]) -> RunResult:
        """Synchronous entry point wrapping :meth:`reconcile`."""

        return asyncio.run(self.reconcile(selection))

    async def reconcile(self, selection: Sequence[PropertySpec]) -> RunResult:
        if self._phase is not RunPhase.IDLE:
            raise RuntimeError("Reconciler instances can only run once")

        started_at = self._clock()
        runs = self._plan(selection)

        self._phase = RunPhase.FETCHING_DESIRED_STATE
        for property_run in runs:
            await self._fetch_desired_state(property_run)

        self._phase = RunPhase.ENUMERATING_ENTITIES
        runnable = [property_run for property_run in runs if property_run.failure is None]
        entities: Sequence[str] = await self._list_entities() if runnable else ()

        self._phase = RunPhase.RECONCILING
        interrupted = False
        try:
            await self._reconcile_all(runnable, entities)
        except asyncio.CancelledError:
            interrupted = True
            log.warning("Run cancelled; in-flight writes recorded as errors")

        result = RunResult(
            organization=self._config.organization,
            dry_run=self._config.dry_run,
            started_at=started_at,
            ended_at=self._clock(),
            sources=tuple(property_run.to_result() for property_run in runs),
            interrupted=interrupted,
        )

        self._phase = RunPhase.REPORTING
        if self._emitter is not None:
            self.report_location = self._emitter.emit(result)

        self._phase = RunPhase.DONE
        return result

    def _plan(self, selection: Sequence[PropertySpec]) -> list[_PropertyRun]:
        runs: dict[str, _PropertyRun] = {}
        for spec in selection:
            adapter = self._sources.get(spec.source)
            if adapter is None:
                raise KeyError(f"No source adapter registered for {spec.source!r}")
            property_run = runs.setdefault(spec.name, _PropertyRun(property=spec.name))
            if adapter not in property_run.adapters:
                property_run.adapters.append(adapter)
        return list(runs.values())

    async def _fetch_desired_state(self, property_run: _PropertyRun) -> None:
        states = []
        for adapter in property_run.adapters:
            log.info("Fetching %s from %s", property_run.property, adapter.source_id)
            # multi-call adapters bound each call; the rest are one remote call
            deadline = None if adapter.per_call_timeouts else self._config.call_timeout_seconds
            try:
                async with asyncio.timeout(deadline):
                    state = await adapter.fetch(property_run.property)
            except TimeoutError:
                property_run.failure = (
                    f"{adapter.source_id}: timed out after "
                    f"{self._config.call_timeout_seconds}s"
                )
            except AdapterUnavailable as exc:
                property_run.failure = str(exc)
            else:
                log.info("  %s returned %d values", adapter.source_id, len(state))
                states.append(state)
                continue
            log.error(
                "Skipping property %s: %s", property_run.property, property_run.failure
            )
            return
        property_run.desired = merge_desired_states(states)

    async def _list_entities(self) -> Sequence[str]:
        try:
            async with asyncio.timeout(self._config.call_timeout_seconds):
                entities = await self._client.list_entities()
        except TimeoutError as exc:
            raise RemoteUnavailable(
                f"Listing entities timed out after {self._config.call_timeout_seconds}s"
            ) from exc
        log.info("Enumerated %d entities", len(entities))
        return entities

    async def _reconcile_all(
        self, runs: Sequence[_PropertyRun], entities: Sequence[str]
    ) -> None:
        self._semaphore = asyncio.Semaphore(self._config.max_concurrency)
        async with asyncio.TaskGroup() as group:
            for property_run in runs:
                log.info(
                    "Syncing property %s (%d desired values)",
                    property_run.property,
                    len(property_run.desired),
                )
                for entity_id in reconciliation_order(entities, property_run.desired):
                    group.create_task(self._reconcile_entity(property_run, entity_id))

    async def _reconcile_entity(self, property_run: _PropertyRun, entity_id: str) -> None:
        if self._semaphore is None:
            raise RuntimeError("Semaphore not initialised")
        property_name = property_run.property
        desired = property_run.desired[entity_id]
        timeout = self._config.call_timeout_seconds

        async with self._semaphore:
            try:
                async with asyncio.timeout(timeout):
                    current = await self._client.get_value(entity_id, property_name)
            except TimeoutError:
                self._record_error(property_run, entity_id, f"read timed out after {timeout}s")
                return
            except EntityReadError as exc:
                self._record_error(property_run, entity_id, exc.message)
                return

            result = diff(entity_id, property_name, current, desired)
            if result.action is DiffAction.NOOP:
                if self._config.verbose:
                    log.debug("  %s: %s already correct (%s)", entity_id, property_name, current)
                return

            if self._config.dry_run:
                log.info(
                    "  [DRY-RUN] %s: %s = %s -> %s",
                    entity_id,
                    property_name,
                    _display(current),
                    _display(desired),
                )
                property_run.updates[entity_id] = result
                return

            try:
                async with asyncio.timeout(timeout):
                    await self._client.set_value(entity_id, property_name, desired)
            except TimeoutError:
                self._record_error(property_run, entity_id, f"write timed out after {timeout}s")
                return
            except EntityWriteError as exc:
                self._record_error(property_run, entity_id, exc.message)
                return
            except asyncio.CancelledError:
                self._record_error(property_run, entity_id, WRITE_CANCELLED_MESSAGE)
                raise

            log.info(
                "  %s: %s = %s -> %s",
                entity_id,
                property_name,
                _display(current),
                _display(desired),
            )
            property_run.updates[entity_id] = result

    def _record_error(self, property_run: _PropertyRun, entity_id: str, message: str) -> None:
        property_run.errors[entity_id] = SyncError(
            entity_id=entity_id,
            property=property_run.property,
            message=message,
        )
        if self._config.verbose:
            log.error("  %s: failed to sync %s - %s", entity_id, property_run.property, message)
