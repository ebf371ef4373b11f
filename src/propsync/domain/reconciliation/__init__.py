"""Reconciliation core: diff, merge, and the run orchestrator."""

from __future__ import annotations

from .differ import diff
from .merge import merge_desired_states, reconciliation_order
from .reconciler import WRITE_CANCELLED_MESSAGE, Reconciler

__all__ = [
    "WRITE_CANCELLED_MESSAGE",
    "Reconciler",
    "diff",
    "merge_desired_states",
    "reconciliation_order",
]
