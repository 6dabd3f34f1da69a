"""Shared fixtures: a scripted PhantomBuster stand-in and a wired test app."""

import pytest
from fastapi.testclient import TestClient

from phantom_relay.api.app import app
from phantom_relay.api.limiter import limiter
from phantom_relay.config import settings
from phantom_relay.errors import LaunchError
from phantom_relay.store.batches import BatchStore, get_store
from phantom_relay.tools.phantombuster import StatusReport, get_client


class FakeAgentClient:
    """
    Records launches and answers status checks from a script.

    statuses maps container id -> list of StatusReport; reports are consumed in
    order and the last one repeats. Unscripted containers stay running.
    """

    def __init__(self, statuses: dict | None = None, launch_errors: list[LaunchError] | None = None):
        self.statuses = statuses or {}
        self.launch_errors = list(launch_errors or [])
        self.launched: list[str] = []
        self.launch_calls = 0
        self.status_calls: list[str] = []

    async def launch(self, search_url: str) -> str:
        self.launch_calls += 1
        if self.launch_errors:
            raise self.launch_errors.pop(0)
        self.launched.append(search_url)
        return f"c{len(self.launched)}"

    async def fetch_status(self, container_id: str) -> StatusReport:
        self.status_calls.append(container_id)
        queue = self.statuses.get(container_id)
        if not queue:
            return StatusReport(status="running")
        return queue.pop(0) if len(queue) > 1 else queue[0]


@pytest.fixture
def fake_client():
    return FakeAgentClient()


@pytest.fixture
def store():
    return BatchStore()


@pytest.fixture
def fast_settings(monkeypatch):
    monkeypatch.setattr(settings, "max_wait_seconds", 0.05)
    monkeypatch.setattr(settings, "poll_interval_seconds", 0.01)
    monkeypatch.setattr(settings, "launch_base_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "launch_jitter_seconds", 0.0)
    monkeypatch.setattr(settings, "launch_mode", "staggered")
    monkeypatch.setattr(settings, "max_results", 200)
    return settings


@pytest.fixture
def api(fake_client, store, fast_settings):
    limiter.reset()
    app.dependency_overrides[get_client] = lambda: fake_client
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
