"""Layer metadata store.

This module is the public read/write surface for per-layer metadata.
Reads and writes go to cached in-memory records; writes are queued and
persisted by a background flusher, so callers never wait on disk except
for the first, single-flight load of a layer.
"""

from __future__ import annotations

from core.config import MetadataStoreConfig
from core.logging_config import get_logger
from core.types import FlushCycleResult, LayerNameSanitizer
from store.layer_paths import LayerPaths, filtered_layer_name
from store.metadata_cache import LayerMetadataCache
from store.metadata_file_codec import MetadataFileCodec
from store.metadata_flusher import MetadataFlusher
from store.metadata_record import LayerMetadataRecord
from store.value_encoding import decode_value, encode_value
from store.write_back_queue import WriteBackQueue

_LOGGER = get_logger(__name__)


class LayerMetadataStore:
    """Cached, write-behind key/value metadata store keyed by layer name.

    The store owns the metadata root directory, the record cache, the
    write-back queue, and the flusher thread. Call ``close`` (or use the
    store as a context manager) to flush pending writes; a best-effort
    flush also runs at interpreter exit.
    """

    def __init__(
        self,
        config: MetadataStoreConfig,
        sanitizer: LayerNameSanitizer = filtered_layer_name,
        start_flusher: bool = True,
    ) -> None:
        """Initialize store from config.

        Args:
            config: Runtime configuration.
            sanitizer: Maps layer names to directory names.
            start_flusher: Whether to start the periodic flush thread.
        """
        self._config = config
        self._codec = MetadataFileCodec(LayerPaths(config.data_root, sanitizer))
        self._queue = WriteBackQueue()
        self._cache = LayerMetadataCache(self._load_record, config.cache_expiry_seconds)
        self._flusher = MetadataFlusher(
            self._queue, self._codec, config.flush_interval_seconds
        )
        self._flusher.register_shutdown_hook()
        if start_flusher:
            self._flusher.start()

    @property
    def codec(self) -> MetadataFileCodec:
        return self._codec

    @property
    def pending_count(self) -> int:
        """Approximate number of queued dirty entries."""
        return len(self._queue)

    def get_layer_metadata(self, layer_name: str) -> dict[str, str]:
        """Return a copy of a layer's stored (encoded) mapping.

        Args:
            layer_name: Layer identifier.

        Returns:
            Independent copy of the current mapping.

        Raises:
            MetadataLoadError: If the layer's file exists but cannot be loaded.
        """
        return self._record(layer_name).data.copy()

    def get_entry(self, layer_name: str, key: str) -> str | None:
        """Return the decoded value for ``key``, or None when absent.

        Raises:
            MetadataLoadError: If the layer's file exists but cannot be loaded.
        """
        value = self._record(layer_name).data.get(key)
        return None if value is None else decode_value(value)

    def put_entry(self, layer_name: str, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and queue the layer for flushing.

        Writing the value already stored is a no-op.

        Args:
            layer_name: Layer identifier.
            key: Metadata key.
            value: Plain text value; encoded before storage.

        Raises:
            MetadataEncodeError: If the value cannot be encoded.
            MetadataLoadError: If the layer's file exists but cannot be loaded.
        """
        record = self._record(layer_name)
        encoded_value = encode_value(value)
        if record.data.get(key) == encoded_value:
            return
        record.data[key] = encoded_value
        record.mark_modified()
        self._queue.put(record)

    def flush(self) -> FlushCycleResult:
        """Run a flush cycle on the calling thread."""
        return self._flusher.commit_updates()

    def close(self) -> None:
        """Stop the flusher after a final flush."""
        self._flusher.stop(final_flush=True)

    def __enter__(self) -> "LayerMetadataStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _record(self, layer_name: str) -> LayerMetadataRecord:
        return self._cache.get(layer_name)

    def _load_record(self, layer_name: str) -> LayerMetadataRecord:
        """Cache loader: build a record from disk, empty when no file exists."""
        data = self._codec.load(layer_name)
        _LOGGER.debug("layer_metadata_cached", layer_name=layer_name, entry_count=len(data))
        return LayerMetadataRecord(layer_name, data)
