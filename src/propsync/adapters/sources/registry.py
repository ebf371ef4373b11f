"""Lookup of source adapters keyed by adapter id."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from propsync.config.errors import ConfigurationError, MissingConfigurationError
from propsync.domain.model import PropertySpec

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsync.domain.model import SourceKind
    from propsync.domain.ports import SourceAdapter

log = getLogger(__name__)

ALL = "all"


@dataclass(frozen=True, slots=True)
class SourceRegistration:
    """How to build one adapter, and which properties it feeds.

    ``factory`` may raise ``MissingConfigurationError`` when the backend is not
    configured. ``in_all`` controls membership in ``--source=all``.
    """

    kind: SourceKind
    properties: tuple[str, ...]
    factory: Callable[[], SourceAdapter]
    aliases: tuple[str, ...] = ()
    in_all: bool = True

    @property
    def source_id(self) -> str:
        return self.kind.value


@dataclass(frozen=True, slots=True)
class SourceSelection:
    """Resolved CLI selection: property specs in invocation order plus their adapters."""

    specs: tuple[PropertySpec, ...] = ()
    adapters: dict[str, SourceAdapter] = field(default_factory=dict)

    @property
    def properties(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(spec.name for spec in self.specs))


class SourceRegistry:
    """Registry of available source adapters, kept in registration order.

    Registration order is invocation order, so for a property fed by several
    sources the one registered last wins the merge.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, SourceRegistration] = {}
        self._aliases: dict[str, str] = {}

    def register(self, registration: SourceRegistration) -> None:
        self._by_id[registration.source_id] = registration
        for alias in registration.aliases:
            self._aliases[alias] = registration.source_id

    def get(self, name: str) -> SourceRegistration | None:
        key = name.strip().lower()
        return self._by_id.get(self._aliases.get(key, key))

    def all(self) -> dict[str, SourceRegistration]:
        return dict(self._by_id)

    def known_properties(self) -> tuple[str, ...]:
        names: dict[str, None] = {}
        for registration in self._by_id.values():
            names.update(dict.fromkeys(registration.properties))
        return tuple(names)

    def select(self, *, source: str = ALL, property_name: str = ALL) -> SourceSelection:
        """Resolve ``--source``/``--property`` into adapters, raising ``ConfigurationError``."""

        registrations = self._select_registrations(source)
        wanted = property_name.strip()
        if wanted != ALL:
            if wanted not in self.known_properties():
                known = ", ".join(self.known_properties())
                raise ConfigurationError(f"Unknown property {wanted!r} (known: {known})")
            registrations = [entry for entry in registrations if wanted in entry.properties]
            if not registrations:
                raise ConfigurationError(
                    f"Source {source!r} does not provide property {wanted!r}"
                )

        specs: list[PropertySpec] = []
        adapters: dict[str, SourceAdapter] = {}
        for registration in registrations:
            try:
                adapter = registration.factory()
            except MissingConfigurationError as exc:
                if source.strip().lower() != ALL:
                    raise
                log.warning("Skipping source %s: %s", registration.source_id, exc)
                continue
            adapters[registration.source_id] = adapter
            specs.extend(
                PropertySpec(name=name, source=registration.kind)
                for name in registration.properties
                if wanted in (ALL, name)
            )

        if not specs:
            raise ConfigurationError("No configured source matches the requested selection")
        return SourceSelection(specs=tuple(specs), adapters=adapters)

    def _select_registrations(self, source: str) -> list[SourceRegistration]:
        if source.strip().lower() == ALL:
            return [entry for entry in self._by_id.values() if entry.in_all]
        registration = self.get(source)
        if registration is None:
            known = ", ".join([*self._by_id, ALL])
            raise ConfigurationError(f"Unknown source {source!r} (known: {known})")
        return [registration]
