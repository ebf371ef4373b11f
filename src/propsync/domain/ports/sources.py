"""Port for the systems of record that supply desired property values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from propsync.domain.model import DesiredState, SourceKind


@runtime_checkable
class SourceAdapter(Protocol):
    """One backend that knows the desired value of one or more properties.

    Adapters never look at the managed system's current state. ``fetch`` raises
    ``AdapterUnavailable`` when the backend cannot be read.

    ``per_call_timeouts`` is true for adapters that issue many remote calls and
    bound each of them; the caller then puts no deadline on ``fetch`` as a whole.
    """

    @property
    def source_id(self) -> str: ...

    @property
    def kind(self) -> SourceKind: ...

    @property
    def properties(self) -> tuple[str, ...]: ...

    @property
    def per_call_timeouts(self) -> bool: ...

    async def fetch(self, property_name: str) -> DesiredState: ...


__all__ = ["SourceAdapter"]
