"""Timestamped JSON report files."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from propsync.domain.model import RunResult

log = getLogger(__name__)

REPORT_PREFIX = "sync-results-"


def report_filename(result: RunResult) -> str:
    millis = int(result.started_at.timestamp() * 1000)
    return f"{REPORT_PREFIX}{millis}.json"


class JsonReportWriter:
    """Write the full ``RunResult`` document into ``report_dir``."""

    def __init__(self, report_dir: Path) -> None:
        self._report_dir = report_dir

    def write(self, result: RunResult) -> str:
        self._report_dir.mkdir(parents=True, exist_ok=True)
        path = self._report_dir / report_filename(result)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(result.to_dict(), handle, indent=2)
            handle.write("\n")
        log.debug("Wrote report %s", path)
        return str(path)
