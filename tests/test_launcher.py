import asyncio

from phantom_relay.agents.launcher import LaunchPolicy, backoff_delay, launch_batch
from phantom_relay.config import settings
from phantom_relay.errors import LaunchError
from tests.conftest import FakeAgentClient

NO_DELAY = LaunchPolicy(base_delay=0, jitter=0, attempts=3)


def test_staggered_launch_creates_one_run_per_title(store):
    client = FakeAgentClient()
    batch = store.create_batch("Acme", ["A", "B", "C"])

    asyncio.run(launch_batch(client, batch, NO_DELAY))

    assert list(batch.runs) == ["A", "B", "C"]
    assert [run.container_id for run in batch.runs.values()] == ["c1", "c2", "c3"]
    assert all(run.status == "running" for run in batch.runs.values())
    assert client.launched[0].endswith("?keywords=A%20%22Acme%22")


def test_failed_launch_is_retried(store):
    client = FakeAgentClient(launch_errors=[LaunchError("HTTP error: 503", http_status=503)])
    batch = store.create_batch("Acme", ["A"])

    asyncio.run(launch_batch(client, batch, NO_DELAY))

    assert client.launch_calls == 2
    assert batch.runs["A"].container_id == "c1"
    assert batch.runs["A"].status == "running"


def test_exhausted_retries_record_error_and_batch_continues(store):
    errors = [LaunchError("no container id") for _ in range(3)]
    client = FakeAgentClient(launch_errors=errors)
    batch = store.create_batch("Acme", ["A", "B"])

    asyncio.run(launch_batch(client, batch, NO_DELAY))

    assert batch.runs["A"].status == "error"
    assert batch.runs["A"].error == "no container id"
    assert batch.runs["A"].container_id is None
    assert batch.runs["B"].container_id == "c1"
    assert client.launch_calls == 4


def test_parallel_launch(store):
    client = FakeAgentClient()
    batch = store.create_batch("Acme", ["A", "B", "C"])

    asyncio.run(launch_batch(client, batch, NO_DELAY.model_copy(update={"mode": "parallel"})))

    assert sorted(batch.runs) == ["A", "B", "C"]
    assert sorted(run.container_id for run in batch.runs.values()) == ["c1", "c2", "c3"]


def test_backoff_doubles_and_throttling_backs_off_harder():
    policy = LaunchPolicy(base_delay=1, backoff_factor=2, jitter=0, max_backoff=30)
    client_error = LaunchError("HTTP error: 400", http_status=400)
    throttled = LaunchError("HTTP error: 429", http_status=429)

    assert backoff_delay(policy, 1, client_error) == 2
    assert backoff_delay(policy, 2, client_error) == 4
    assert backoff_delay(policy, 1, throttled) == 4
    assert backoff_delay(policy, 10, throttled) == 30


def test_backoff_jitter_stays_within_bounds():
    policy = LaunchPolicy(base_delay=1, backoff_factor=2, jitter=0.5, max_backoff=30)
    for _ in range(50):
        delay = backoff_delay(policy, 1, LaunchError("x", http_status=500))
        assert 4 <= delay <= 4.5


def test_request_timeout_and_network_errors_back_off_like_throttling():
    policy = LaunchPolicy(base_delay=1, backoff_factor=2, jitter=0, max_backoff=30)
    throttled = backoff_delay(policy, 1, LaunchError("HTTP error: 429", http_status=429))

    assert backoff_delay(policy, 1, LaunchError("HTTP error: 408", http_status=408)) == throttled
    assert backoff_delay(policy, 1, LaunchError("connect failed", transport=True)) == throttled


def test_launch_attempts_setting_caps_total_tries(store, monkeypatch):
    monkeypatch.setattr(settings, "launch_attempts", 2)
    monkeypatch.setattr(settings, "launch_base_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "launch_jitter_seconds", 0.0)
    client = FakeAgentClient(launch_errors=[LaunchError("HTTP error: 400", http_status=400) for _ in range(5)])
    batch = store.create_batch("Acme", ["A"])

    asyncio.run(launch_batch(client, batch, LaunchPolicy.from_settings()))

    assert client.launch_calls == 2
    assert batch.runs["A"].status == "error"
