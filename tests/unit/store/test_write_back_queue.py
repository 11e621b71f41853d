"""Unit tests for the write-back queue."""

from __future__ import annotations

import threading

from store.metadata_record import LayerMetadataRecord
from store.write_back_queue import WriteBackQueue


def test_drain_unique_collapses_repeated_records() -> None:
    """Repeated enqueues of one layer drain as a single record."""
    update_queue = WriteBackQueue()
    roads = LayerMetadataRecord("roads")
    rivers = LayerMetadataRecord("rivers")
    for record in (roads, rivers, roads, roads):
        update_queue.put(record)

    drained = update_queue.drain_unique()

    assert [record.layer_name for record in drained] == ["roads", "rivers"]
    assert len(update_queue) == 0


def test_drain_unique_on_empty_queue() -> None:
    """Draining an empty queue returns nothing."""
    assert WriteBackQueue().drain_unique() == []


def test_concurrent_producers_are_all_drained() -> None:
    """Every layer enqueued from many threads shows up once."""
    update_queue = WriteBackQueue()

    def _produce(worker: int) -> None:
        for index in range(50):
            update_queue.put(LayerMetadataRecord(f"layer-{worker}-{index % 10}"))

    threads = [threading.Thread(target=_produce, args=(worker,)) for worker in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(update_queue.drain_unique()) == 40
