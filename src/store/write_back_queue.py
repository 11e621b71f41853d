"""Queue of dirty layer metadata records awaiting a flush."""

from __future__ import annotations

import queue

from store.metadata_record import LayerMetadataRecord


class WriteBackQueue:
    """Multi-producer queue drained by a single flusher.

    The same record may be enqueued any number of times; duplicates are
    collapsed when the queue is drained, never when it is filled.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[LayerMetadataRecord] = queue.SimpleQueue()

    def put(self, record: LayerMetadataRecord) -> None:
        """Enqueue a dirty record without blocking."""
        self._queue.put(record)

    def drain_unique(self) -> list[LayerMetadataRecord]:
        """Remove all queued entries and return one record per layer.

        Returns:
            Distinct records in first-enqueued order.
        """
        unique: dict[str, LayerMetadataRecord] = {}
        while True:
            try:
                record = self._queue.get_nowait()
            except queue.Empty:
                break
            unique.setdefault(record.layer_name, record)
        return list(unique.values())

    def __len__(self) -> int:
        """Approximate number of queued entries, duplicates included."""
        return self._queue.qsize()
