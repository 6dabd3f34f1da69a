"""Batch store package."""

from phantom_relay.store.batches import (
    ABORTED,
    ERROR,
    FINISHED,
    RUNNING,
    TERMINAL_STATUSES,
    Batch,
    BatchStore,
    Run,
    get_store,
)

__all__ = [
    "Batch",
    "BatchStore",
    "Run",
    "get_store",
    "RUNNING",
    "FINISHED",
    "ABORTED",
    "ERROR",
    "TERMINAL_STATUSES",
]
