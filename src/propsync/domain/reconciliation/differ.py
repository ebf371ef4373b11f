"""Classify one (entity, property) pair as noop or update."""

from __future__ import annotations

from typing import TYPE_CHECKING

from propsync.domain.model import Diff, DiffAction

if TYPE_CHECKING:
    from propsync.domain.model import PropertyValue


def diff(
    entity_id: str,
    property_name: str,
    current: PropertyValue,
    desired: PropertyValue,
) -> Diff:
    """Compare values for exact equality; no trimming or case folding happens here."""

    action = DiffAction.NOOP if current == desired else DiffAction.UPDATE
    return Diff(
        entity_id=entity_id,
        property=property_name,
        old_value=current,
        new_value=desired,
        action=action,
    )
