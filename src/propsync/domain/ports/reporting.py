"""Port for destinations that persist a finished run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from propsync.domain.model import RunResult


@runtime_checkable
class ReportSink(Protocol):
    def write(self, result: RunResult) -> str | None:
        """Persist ``result``; return a human-readable location if there is one."""
        ...


__all__ = ["ReportSink"]
