"""Public import surface for the layer metadata store.

This module provides a stable import path for library users.
It re-exports the store, its configuration, and the error types.
"""

from __future__ import annotations

from core.config import MetadataStoreConfig
from core.errors import (
    MetadataConfigError,
    MetadataDirectoryError,
    MetadataEncodeError,
    MetadataLoadError,
    MetadataMalformedError,
    MetadataReadError,
    MetadataStoreError,
    MetadataWriteError,
)
from core.types import FlushCycleResult
from store.layer_metadata_store import LayerMetadataStore
from store.layer_paths import filtered_layer_name

__all__ = [
    "FlushCycleResult",
    "LayerMetadataStore",
    "MetadataConfigError",
    "MetadataDirectoryError",
    "MetadataEncodeError",
    "MetadataLoadError",
    "MetadataMalformedError",
    "MetadataReadError",
    "MetadataStoreError",
    "MetadataStoreConfig",
    "MetadataWriteError",
    "filtered_layer_name",
]
