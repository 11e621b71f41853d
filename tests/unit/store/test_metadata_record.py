"""Unit tests for metadata records and the modification counter."""

from __future__ import annotations

import threading

from store.metadata_record import LayerMetadataRecord, ModificationCounter


def test_compare_and_set_only_swaps_expected_value() -> None:
    """A stale expectation leaves the counter unchanged."""
    counter = ModificationCounter()
    counter.increment()
    counter.increment()

    assert counter.compare_and_set(1, 0) is False
    assert counter.compare_and_set(2, 0) is True
    assert counter.get() == 0


def test_counter_increments_are_not_lost_across_threads() -> None:
    """Concurrent increments all land."""
    counter = ModificationCounter()

    def _bump() -> None:
        for _ in range(1000):
            counter.increment()

    threads = [threading.Thread(target=_bump) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter.get() == 8000


def test_records_compare_by_layer_name_only() -> None:
    """Two records for one layer are interchangeable in sets."""
    first = LayerMetadataRecord("roads", {"a": "1"})
    second = LayerMetadataRecord("roads", {"b": "2"})

    assert first == second and len({first, second}) == 1
    assert first != LayerMetadataRecord("rivers")


def test_snapshot_copies_mapping() -> None:
    """Later writes do not leak into a taken snapshot."""
    record = LayerMetadataRecord("roads", {"a": "1"})
    record.mark_modified()

    observed, data = record.snapshot()
    record.data["b"] = "2"

    assert (observed, data) == (1, {"a": "1"})


def test_reset_fails_after_concurrent_mutation() -> None:
    """A mutation after the snapshot makes the reset fail."""
    record = LayerMetadataRecord("roads")
    record.mark_modified()
    observed, _ = record.snapshot()
    record.mark_modified()

    assert record.reset_modifications(observed) is False
    assert record.is_dirty


def test_reset_clears_dirty_flag() -> None:
    """An uncontended reset marks the record clean."""
    record = LayerMetadataRecord("roads")
    record.mark_modified()
    observed, _ = record.snapshot()

    assert record.reset_modifications(observed) is True
    assert not record.is_dirty
