"""Background write-back of dirty layer metadata.

This module drains the write-back queue on a fixed interval and commits
each distinct dirty record with an optimistic protocol: snapshot the
counter and mapping, reset the counter by compare-and-set, and only then
write the snapshot. A failed reset means a writer raced the snapshot, so
the loop retries with fresh data. Write failures re-mark the record dirty
and requeue it for the next cycle; callers never see them.
"""

from __future__ import annotations

import atexit
import threading

from core.errors import MetadataDirectoryError, MetadataWriteError
from core.constants import FLUSHER_THREAD_NAME
from core.logging_config import get_logger
from core.types import FlushCycleResult
from store.metadata_file_codec import MetadataFileCodec
from store.metadata_record import LayerMetadataRecord
from store.write_back_queue import WriteBackQueue

_LOGGER = get_logger(__name__)


class MetadataFlusher:
    """Single execution path for all metadata file writes."""

    def __init__(
        self,
        update_queue: WriteBackQueue,
        codec: MetadataFileCodec,
        interval_seconds: float,
    ) -> None:
        """Initialize flusher.

        Args:
            update_queue: Queue fed by metadata writers.
            codec: File codec used to persist snapshots.
            interval_seconds: Delay between periodic flush cycles.
        """
        self._queue = update_queue
        self._codec = codec
        self._interval = interval_seconds
        self._flush_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._hook_registered = False
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def commit_updates(self) -> FlushCycleResult:
        """Run one flush cycle.

        Returns:
            Summary of the cycle.

        Raises:
            MetadataDirectoryError: If a layer directory cannot be created.
        """
        with self._flush_lock:
            records = self._queue.drain_unique()
            committed: list[str] = []
            failed: list[str] = []
            cas_retries = 0
            for index, record in enumerate(records):
                # already persisted by an earlier cycle's retry
                if not record.is_dirty:
                    continue
                try:
                    written, retries = self._commit_record(record)
                except MetadataDirectoryError:
                    for remaining in records[index + 1 :]:
                        self._queue.put(remaining)
                    raise
                cas_retries += retries
                (committed if written else failed).append(record.layer_name)
        result = FlushCycleResult(
            unique_records=len(records),
            committed=tuple(committed),
            failed=tuple(failed),
            cas_retries=cas_retries,
        )
        if records:
            _LOGGER.debug(
                "metadata_flush_cycle",
                unique_records=result.unique_records,
                committed=len(result.committed),
                failed=len(result.failed),
                cas_retries=result.cas_retries,
            )
        return result

    def start(self) -> None:
        """Start the periodic flush thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._stopped = False
        self._thread = threading.Thread(
            target=self._run_periodic,
            name=FLUSHER_THREAD_NAME,
            daemon=True,
        )
        self._thread.start()
        _LOGGER.info("metadata_flusher_started", interval_seconds=self._interval)

    def stop(self, final_flush: bool = True) -> FlushCycleResult | None:
        """Stop the periodic thread and optionally flush once more.

        Args:
            final_flush: Whether to run a last best-effort cycle.

        Returns:
            Final cycle result, or None when no final flush ran.
        """
        if self._stopped:
            return None
        self._stopped = True
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        self._unregister_shutdown_hook()
        result = self.commit_updates() if final_flush else None
        _LOGGER.info("metadata_flusher_stopped", final_flush=final_flush)
        return result

    def register_shutdown_hook(self) -> None:
        """Flush pending records when the interpreter exits gracefully."""
        if self._hook_registered:
            return
        atexit.register(self._shutdown_flush)
        self._hook_registered = True

    def _unregister_shutdown_hook(self) -> None:
        if self._hook_registered:
            atexit.unregister(self._shutdown_flush)
            self._hook_registered = False

    def _shutdown_flush(self) -> None:
        self.stop(final_flush=True)

    def _run_periodic(self) -> None:
        """Flush every interval until stopped."""
        while not self._stop_event.wait(self._interval):
            try:
                self.commit_updates()
            except MetadataDirectoryError as error:
                _LOGGER.error(
                    "metadata_flush_failed", error=str(error), fatal=True, exc_info=True
                )
                return
            except Exception as error:
                _LOGGER.error(
                    "metadata_flush_failed", error=str(error), fatal=False, exc_info=True
                )

    def _commit_record(self, record: LayerMetadataRecord) -> tuple[bool, int]:
        """Commit one dirty record.

        Args:
            record: Record drained from the queue.

        Returns:
            Pair of (written, number of compare-and-set retries).

        Raises:
            MetadataDirectoryError: If the layer directory cannot be created.
        """
        retries = 0
        while True:
            observed, data = record.snapshot()
            if record.reset_modifications(observed):
                break
            retries += 1
        try:
            self._codec.write(record.layer_name, data)
        except MetadataDirectoryError:
            record.mark_modified()
            raise
        except MetadataWriteError as error:
            record.mark_modified()
            self._queue.put(record)
            _LOGGER.warning(
                "layer_metadata_write_failed",
                layer_name=record.layer_name,
                error=str(error),
            )
            return False, retries
        return True, retries
