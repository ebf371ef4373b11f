"""Domain port definitions for adapters."""

from __future__ import annotations

from .remote import RemoteStateClient
from .reporting import ReportSink
from .sources import SourceAdapter

__all__ = ["RemoteStateClient", "ReportSink", "SourceAdapter"]
