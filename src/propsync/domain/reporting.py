"""Assemble and persist the summary of a finished run."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propsync.domain.model import RunResult
    from propsync.domain.ports import ReportSink

log = getLogger(__name__)

_RULE = "=" * 60


class ReportEmitter:
    """Log the run summary and hand the result to every sink.

    The first sink is the primary report; its failure propagates. Failures of
    later (audit) sinks are logged and do not affect the run outcome.
    """

    def __init__(self, sinks: Sequence[ReportSink]) -> None:
        self._sinks = tuple(sinks)

    def emit(self, result: RunResult) -> str | None:
        _log_summary(result)

        location: str | None = None
        for index, sink in enumerate(self._sinks):
            if index == 0:
                location = sink.write(result)
                continue
            try:
                sink.write(result)
            except Exception:
                log.exception("Audit sink %s failed", type(sink).__name__)

        if location is not None:
            log.info("Detailed results written to: %s", location)
        return location


def _log_summary(result: RunResult) -> None:
    log.info(_RULE)
    log.info("SYNC COMPLETE" if not result.interrupted else "SYNC INTERRUPTED")
    log.info(_RULE)
    log.info("Duration: %.2fs", result.duration_seconds)
    log.info("Total updates: %d", result.total_updates)
    log.info("Total errors: %d", result.total_errors)
    for property_result in result.sources:
        if property_result.failure is not None:
            log.error("Property %s failed: %s", property_result.property, property_result.failure)
    if result.dry_run:
        log.warning("DRY-RUN MODE: no changes were made; run without --dry-run to apply them")
