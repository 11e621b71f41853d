"""Core constants used across layer metadata modules.

This module centralizes file names, defaults, and environment keys.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".layer-metadata")
LEGACY_METADATA_FILE_NAME = "metadata.properties"
METADATA_GZIP_EXTENSION = ".gz"
METADATA_FILE_NAME = LEGACY_METADATA_FILE_NAME + METADATA_GZIP_EXTENSION
METADATA_FILE_COMMENT = "auto generated file, do not edit by hand"
METADATA_TEXT_ENCODING = "utf-8"
DEFAULT_FLUSH_INTERVAL_SECONDS = 5.0
DEFAULT_CACHE_EXPIRY_SECONDS = 600.0
FLUSHER_THREAD_NAME = "layer-metadata-flusher"
ENV_DATA_ROOT = "LAYER_METADATA_ROOT"
ENV_FLUSH_INTERVAL = "LAYER_METADATA_FLUSH_INTERVAL"
ENV_CACHE_EXPIRY = "LAYER_METADATA_CACHE_EXPIRY"
ENV_MAX_RW_ATTEMPTS = "LAYER_METADATA_MAX_RW_ATTEMPTS"
ENV_WAIT_AFTER_RENAME = "LAYER_METADATA_WAIT_AFTER_RENAME"
