"""Value objects produced and consumed by a reconciliation run."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

type PropertyValue = str | None
# ``None`` means "clear the property"; a missing key means "no opinion".
type DesiredState = Mapping[str, PropertyValue]


class SourceKind(StrEnum):
    BILLING = "billing"
    LDAP = "ldap"
    CMDB = "cmdb"
    MANAGED_PLATFORM_TEAMS = "managed-platform-teams"


class DiffAction(StrEnum):
    NOOP = "noop"
    UPDATE = "update"


class RunPhase(StrEnum):
    IDLE = "idle"
    FETCHING_DESIRED_STATE = "fetching_desired_state"
    ENUMERATING_ENTITIES = "enumerating_entities"
    RECONCILING = "reconciling"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class PropertySpec:
    """One reconciliation unit: a property fed by one source."""

    name: str
    source: SourceKind


@dataclass(frozen=True, slots=True, kw_only=True)
class Diff:
    entity_id: str
    property: str
    old_value: PropertyValue
    new_value: PropertyValue
    action: DiffAction

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "property": self.property,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncError:
    entity_id: str
    property: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "property": self.property,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class PropertyResult:
    """Outcome for one property; ``failure`` is set when its sources could not be read."""

    property: str
    adapters: tuple[str, ...] = ()
    updates: tuple[Diff, ...] = ()
    errors: tuple[SyncError, ...] = ()
    failure: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "property": self.property,
            "adapters": list(self.adapters),
            "failure": self.failure,
            "updates_count": len(self.updates),
            "errors_count": len(self.errors),
            "updates": [diff.to_dict() for diff in self.updates],
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class RunResult:
    organization: str
    dry_run: bool
    started_at: datetime
    ended_at: datetime
    sources: tuple[PropertyResult, ...] = field(default_factory=tuple)
    interrupted: bool = False

    @property
    def total_updates(self) -> int:
        return sum(len(result.updates) for result in self.sources)

    @property
    def total_errors(self) -> int:
        return sum(len(result.errors) for result in self.sources)

    @property
    def failed_properties(self) -> tuple[str, ...]:
        return tuple(result.property for result in self.sources if result.failure is not None)

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()

    @property
    def exit_code(self) -> int:
        if self.total_errors or self.failed_properties or self.interrupted:
            return 1
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "organization": self.organization,
            "dry_run": self.dry_run,
            "interrupted": self.interrupted,
            "sources": [result.to_dict() for result in self.sources],
            "total_updates": self.total_updates,
            "total_errors": self.total_errors,
            "start_time": _isoformat(self.started_at),
            "end_time": _isoformat(self.ended_at),
            "duration_seconds": round(self.duration_seconds, 3),
        }


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()
