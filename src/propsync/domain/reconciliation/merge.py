"""Merge desired states from several sources feeding the same property."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsync.domain.model import DesiredState, PropertyValue


def merge_desired_states(states: Iterable[DesiredState]) -> dict[str, PropertyValue]:
    """Fold ``states`` in invocation order; the last source to mention an entity wins.

    An explicit ``None`` overrides earlier values (clear the property), while an
    entity a later source does not mention keeps the earlier value. Keys keep the
    position of their first appearance.
    """

    merged: dict[str, PropertyValue] = {}
    for state in states:
        for entity_id, value in state.items():
            merged[entity_id] = value
    return merged


def reconciliation_order(
    entities: Iterable[str],
    desired: DesiredState,
) -> list[str]:
    """Entities to reconcile: enumeration order first, then unseen desired keys.

    Enumerated entities the sources have no opinion about are skipped. Desired
    keys the enumeration did not return (archived, not yet visible) follow in the
    desired state's insertion order.
    """

    ordered: list[str] = []
    enumerated: set[str] = set()
    for entity_id in entities:
        if entity_id in enumerated:
            continue
        enumerated.add(entity_id)
        if entity_id in desired:
            ordered.append(entity_id)
    ordered.extend(entity_id for entity_id in desired if entity_id not in enumerated)
    return ordered
