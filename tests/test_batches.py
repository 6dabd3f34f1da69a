import pytest
from cachetools import TTLCache

from phantom_relay.errors import UnknownBatchError
from phantom_relay.store.batches import BatchStore, Run


def test_create_and_get_batch(store):
    batch = store.create_batch("Acme", ["A", "B"])

    assert store.get_batch(batch.batch_id) is batch
    assert batch.company == "Acme"
    assert batch.titles == ["A", "B"]
    assert batch.runs == {}
    assert len(store) == 1


def test_batch_ids_are_unique(store):
    ids = {store.create_batch("Acme", ["A"]).batch_id for _ in range(200)}
    assert len(ids) == 200


def test_unknown_batch_raises(store):
    with pytest.raises(UnknownBatchError):
        store.get_batch("missing")


def test_ttl_store_uses_bounded_cache():
    store = BatchStore(ttl_seconds=60, max_entries=2)
    assert isinstance(store._batches, TTLCache)
    first = store.create_batch("Acme", ["A"])
    store.create_batch("Acme", ["B"])
    store.create_batch("Acme", ["C"])
    assert first.batch_id not in store
    assert len(store) == 2


def test_run_status_is_monotone():
    run = Run(title="A", url="u", container_id="c1")

    assert run.finish([{"url": "x"}])
    assert not run.fail("error", "late failure")
    assert not run.finish(None)
    assert run.status == "finished"
    assert run.result == [{"url": "x"}]
    assert run.error is None


def test_run_container_id_is_immutable():
    run = Run(title="A", url="u")
    run.assign_container("c1")
    run.assign_container("c1")
    with pytest.raises(ValueError):
        run.assign_container("c2")


def test_all_finished_requires_every_title():
    store = BatchStore()
    batch = store.create_batch("Acme", ["A", "B"])
    batch.runs["A"] = Run(title="A", url="u", status="finished")
    assert not batch.all_finished
    batch.runs["B"] = Run(title="B", url="u", status="error", error="boom")
    assert batch.all_finished
