"""SQLAlchemy adapter package for the run audit log."""

from __future__ import annotations

from .audit import SqlAlchemyAuditStore
from .tables import create_all_tables, metadata, sync_outcome_table, sync_run_table

__all__ = [
    "SqlAlchemyAuditStore",
    "create_all_tables",
    "metadata",
    "sync_outcome_table",
    "sync_run_table",
]
