"""Failure taxonomy for a property sync run.

Scope decides how far a failure reaches:

- ``AdapterUnavailable`` aborts one property (other properties still run).
- ``RemoteUnavailable`` aborts the whole run.
- ``EntityReadError`` / ``EntityWriteError`` are isolated to one
  (entity, property) pair and end up as ``SyncError`` records.
"""

from __future__ import annotations


class PropertySyncError(RuntimeError):
    """Base class for sync failures."""


class AdapterUnavailable(PropertySyncError):
    """A source of truth was unreachable or returned malformed data."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class RemoteUnavailable(PropertySyncError):
    """The managed system could not enumerate entities."""


class EntityError(PropertySyncError):
    def __init__(self, entity_id: str, property_name: str, message: str) -> None:
        super().__init__(message)
        self.entity_id = entity_id
        self.property_name = property_name
        self.message = message


class EntityReadError(EntityError):
    """Reading the current value of one entity's property failed."""


class EntityWriteError(EntityError):
    """Writing the desired value of one entity's property failed."""
