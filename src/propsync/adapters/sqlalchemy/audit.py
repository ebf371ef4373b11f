"""Append-only audit log of sync runs."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, insert

from .tables import create_all_tables, sync_outcome_table, sync_run_table

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from propsync.domain.model import RunResult

log = getLogger(__name__)


class SqlAlchemyAuditStore:
    """Record every finished run (and each update/error) in one transaction."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._tables_ready = False

    @classmethod
    def from_uri(cls, database_uri: str) -> SqlAlchemyAuditStore:
        return cls(create_engine(database_uri, future=True))

    def write(self, result: RunResult) -> str | None:
        if not self._tables_ready:
            create_all_tables(self.engine)
            self._tables_ready = True

        with self.engine.begin() as connection:
            inserted = connection.execute(
                insert(sync_run_table).values(
                    organization=result.organization,
                    dry_run=result.dry_run,
                    interrupted=result.interrupted,
                    started_at=result.started_at,
                    ended_at=result.ended_at,
                    duration_seconds=result.duration_seconds,
                    total_updates=result.total_updates,
                    total_errors=result.total_errors,
                    failed_properties=",".join(result.failed_properties) or None,
                    exit_code=result.exit_code,
                )
            )
            run_id = inserted.inserted_primary_key[0]
            rows = _outcome_rows(result, run_id)
            if rows:
                connection.execute(insert(sync_outcome_table), rows)

        log.debug("Recorded run %s in audit log", run_id)
        return None

    def dispose(self) -> None:
        self.engine.dispose()


def _outcome_rows(result: RunResult, run_id: int) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for property_result in result.sources:
        rows.extend(
            {
                "run_id": run_id,
                "property": diff.property,
                "entity_id": diff.entity_id,
                "kind": "update",
                "old_value": diff.old_value,
                "new_value": diff.new_value,
                "message": None,
            }
            for diff in property_result.updates
        )
        rows.extend(
            {
                "run_id": run_id,
                "property": error.property,
                "entity_id": error.entity_id,
                "kind": "error",
                "old_value": None,
                "new_value": None,
                "message": error.message,
            }
            for error in property_result.errors
        )
    return rows
