"""Port for the managed system whose repository properties are reconciled."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propsync.domain.model import PropertyValue


@runtime_checkable
class RemoteStateClient(Protocol):
    """Read and write property values on managed entities.

    ``list_entities`` raises ``RemoteUnavailable``; ``get_value`` raises
    ``EntityReadError``; ``set_value`` raises ``EntityWriteError``. ``set_value``
    is the only mutating call.
    """

    async def list_entities(self) -> Sequence[str]: ...

    async def get_value(self, entity_id: str, property_name: str) -> PropertyValue: ...

    async def set_value(
        self, entity_id: str, property_name: str, value: PropertyValue
    ) -> None: ...


__all__ = ["RemoteStateClient"]
