"""In-memory batch table."""

import logging
import uuid
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any

from cachetools import TTLCache
from pydantic import BaseModel, Field

from phantom_relay.config import settings
from phantom_relay.errors import UnknownBatchError

logger = logging.getLogger(__name__)

RUNNING = "running"
FINISHED = "finished"
ABORTED = "aborted"
ERROR = "error"
TERMINAL_STATUSES = frozenset({FINISHED, ABORTED, ERROR})


def generate_batch_id() -> str:
    return uuid.uuid4().hex


class Run(BaseModel):
    """Launch/poll/result state of one (title, company) search."""

    title: str
    url: str
    container_id: str | None = None
    status: str = RUNNING
    result: Any = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def assign_container(self, container_id: str) -> None:
        if self.container_id is not None and self.container_id != container_id:
            raise ValueError(f"Run '{self.title}' already has container {self.container_id}")
        self.container_id = container_id

    def finish(self, result: Any) -> bool:
        """Mark finished with the payload as returned. False if already terminal."""
        if self.is_terminal:
            return False
        self.status = FINISHED
        self.result = result
        return True

    def fail(self, status: str, error: str | None) -> bool:
        """Mark aborted/error with detail. False if already terminal."""
        if status not in (ABORTED, ERROR):
            raise ValueError(f"Not a failure status: {status}")
        if self.is_terminal:
            return False
        self.status = status
        self.error = error
        return True


class Batch(BaseModel):
    """Per-title runs submitted together by one request."""

    batch_id: str = Field(default_factory=generate_batch_id)
    company: str
    titles: list[str]
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    runs: dict[str, Run] = Field(default_factory=dict)

    def running(self) -> list[Run]:
        return [run for run in self.runs.values() if not run.is_terminal]

    @property
    def all_finished(self) -> bool:
        return len(self.runs) == len(self.titles) and not self.running()


class BatchStore:
    """
    Process-scoped batch table.

    With ttl_seconds <= 0 batches live as long as the process. Otherwise the
    table is a bounded TTL cache and batches expire after ttl_seconds.
    """

    def __init__(self, ttl_seconds: float = 0, max_entries: int = 1000):
        if ttl_seconds and ttl_seconds > 0:
            self._batches: MutableMapping[str, Batch] = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        else:
            self._batches = {}

    def create_batch(self, company: str, titles: list[str]) -> Batch:
        batch = Batch(company=company, titles=list(titles))
        while batch.batch_id in self._batches:
            batch.batch_id = generate_batch_id()
        self._batches[batch.batch_id] = batch
        logger.info(f"[{batch.batch_id}] Created batch for '{company}' with {len(titles)} titles")
        return batch

    def get_batch(self, batch_id: str) -> Batch:
        batch = self._batches.get(batch_id)
        if batch is None:
            raise UnknownBatchError(f"Batch not found: {batch_id}")
        return batch

    def __len__(self) -> int:
        return len(self._batches)

    def __contains__(self, batch_id: str) -> bool:
        return batch_id in self._batches


_store: BatchStore | None = None


def get_store() -> BatchStore:
    """Get or create the process batch store. FastAPI dependency."""
    global _store
    if _store is None:
        _store = BatchStore(
            ttl_seconds=settings.batch_ttl_seconds,
            max_entries=settings.batch_max_entries,
        )
    return _store
