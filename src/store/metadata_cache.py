"""Single-flight lazy cache of layer metadata records.

The first caller for an uncached layer runs the loader; concurrent callers
for the same layer wait on the same future instead of reading the disk
again. Loads for different layers run in parallel because the loader is
always invoked outside the index lock. Entries expire after a period
without access and are reloaded on demand; a record with unflushed
changes stays cached until the flusher has written it.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
import threading
import time
from typing import Callable

from core.logging_config import get_logger
from store.metadata_record import LayerMetadataRecord

_LOGGER = get_logger(__name__)

RecordLoader = Callable[[str], LayerMetadataRecord]


@dataclass
class _CacheEntry:
    future: Future
    last_access: float


class LayerMetadataCache:
    """Expire-after-access map from layer name to metadata record."""

    def __init__(
        self,
        loader: RecordLoader,
        expire_after_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            loader: Builds a record for an uncached layer; may raise.
            expire_after_seconds: Idle time before an entry is dropped.
            clock: Monotonic time source, injectable for tests.
        """
        self._loader = loader
        self._expire_after = expire_after_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, layer_name: str) -> LayerMetadataRecord:
        """Return the cached record, loading it on first access.

        Args:
            layer_name: Layer identifier.

        Returns:
            Live record shared by all callers.

        Raises:
            Exception: Whatever the loader raised for this load attempt.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(layer_name)
            if entry is not None and self._is_expired(entry, now):
                del self._entries[layer_name]
                entry = None
            owner = entry is None
            if owner:
                self._evict_expired_locked(now)
                entry = _CacheEntry(future=Future(), last_access=now)
                self._entries[layer_name] = entry
            else:
                entry.last_access = now
        if owner:
            self._run_loader(layer_name, entry)
        return entry.future.result()

    def evict_expired(self) -> int:
        """Drop entries idle past the expiry window.

        Returns:
            Number of evicted entries.
        """
        with self._lock:
            return self._evict_expired_locked(self._clock())

    def invalidate_all(self) -> None:
        """Forget every cached record; files on disk are untouched."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, layer_name: object) -> bool:
        with self._lock:
            return layer_name in self._entries

    def _run_loader(self, layer_name: str, entry: _CacheEntry) -> None:
        """Run the loader and publish its outcome to every waiter."""
        try:
            record = self._loader(layer_name)
        except Exception as error:
            with self._lock:
                if self._entries.get(layer_name) is entry:
                    del self._entries[layer_name]
            entry.future.set_exception(error)
            return
        entry.future.set_result(record)

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        # in-flight loads and records with unflushed changes never expire
        if not entry.future.done() or entry.future.exception() is not None:
            return False
        if entry.future.result().is_dirty:
            return False
        return now - entry.last_access > self._expire_after

    def _evict_expired_locked(self, now: float) -> int:
        expired = [
            layer_name
            for layer_name, entry in self._entries.items()
            if self._is_expired(entry, now)
        ]
        for layer_name in expired:
            del self._entries[layer_name]
            _LOGGER.debug("layer_metadata_evicted", layer_name=layer_name)
        return len(expired)
