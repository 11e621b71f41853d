"""Metadata file persistence.

This module resolves, reads, and writes a layer's persisted metadata.
Reads prefer the compressed file and fall back to the legacy plain file;
writes always target the compressed file, which migrates legacy layers
lazily on their first successful flush. Legacy files are never removed.
"""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import Mapping
import zlib

from core.constants import (
    LEGACY_METADATA_FILE_NAME,
    METADATA_FILE_COMMENT,
    METADATA_TEXT_ENCODING,
)
from core.errors import (
    MetadataDirectoryError,
    MetadataMalformedError,
    MetadataReadError,
    MetadataWriteError,
)
from core.logging_config import get_logger
from store.layer_paths import LayerPaths
from store.properties_codec import format_properties, parse_properties

_LOGGER = get_logger(__name__)


class MetadataFileCodec:
    """Filesystem codec for per-layer metadata properties files."""

    def __init__(self, paths: LayerPaths) -> None:
        self._paths = paths

    @property
    def paths(self) -> LayerPaths:
        return self._paths

    def resolve_metadata_file(self, layer_name: str) -> Path:
        """Return the file a load for this layer should read.

        Args:
            layer_name: Layer identifier.

        Returns:
            The compressed file when present, otherwise the legacy path,
            which may not exist either.
        """
        metadata_file = self._paths.metadata_file(layer_name)
        if metadata_file.exists():
            return metadata_file
        return self._paths.legacy_metadata_file(layer_name)

    def load(self, layer_name: str) -> dict[str, str]:
        """Load a layer's persisted mapping.

        Args:
            layer_name: Layer identifier.

        Returns:
            Stored key/value pairs; empty when no file exists.

        Raises:
            MetadataReadError: If the file exists but cannot be read.
            MetadataMalformedError: If the file content cannot be decoded.
        """
        metadata_file = self.resolve_metadata_file(layer_name)
        if not metadata_file.exists():
            return {}
        try:
            payload = metadata_file.read_bytes()
        except OSError as error:
            raise MetadataReadError(
                f"Failed to read layer metadata for '{layer_name}' at {metadata_file}: {error}. "
                "Check file permissions and retry."
            ) from error
        compressed = metadata_file.name != LEGACY_METADATA_FILE_NAME
        properties = _decode_payload(layer_name, metadata_file, payload, compressed)
        _LOGGER.debug(
            "layer_metadata_loaded",
            layer_name=layer_name,
            path=str(metadata_file),
            compressed=compressed,
            entry_count=len(properties),
        )
        return properties

    def write(self, layer_name: str, properties: Mapping[str, str]) -> Path:
        """Write a layer's mapping to the compressed metadata file.

        The file is overwritten in place.

        Args:
            layer_name: Layer identifier.
            properties: Key/value pairs with values already encoded.

        Returns:
            Path of the written file.

        Raises:
            MetadataDirectoryError: If the layer directory cannot be created.
            MetadataWriteError: If the file cannot be written.
        """
        metadata_file = self._paths.metadata_file(layer_name)
        _create_parent_if_needed(metadata_file)
        text = format_properties(properties, comment=METADATA_FILE_COMMENT)
        try:
            with gzip.open(
                metadata_file, "wt", encoding=METADATA_TEXT_ENCODING, newline="\n"
            ) as writer:
                writer.write(text)
        except OSError as error:
            raise MetadataWriteError(
                f"Failed to write layer metadata for '{layer_name}' at {metadata_file}: {error}."
            ) from error
        _LOGGER.info(
            "layer_metadata_written",
            layer_name=layer_name,
            path=str(metadata_file),
            entry_count=len(properties),
        )
        return metadata_file


def _decode_payload(
    layer_name: str,
    metadata_file: Path,
    payload: bytes,
    compressed: bool,
) -> dict[str, str]:
    """Decompress, decode, and parse raw file bytes.

    Raises:
        MetadataMalformedError: If any decoding stage fails.
    """
    try:
        raw_text = gzip.decompress(payload) if compressed else payload
        return parse_properties(raw_text.decode(METADATA_TEXT_ENCODING))
    except (gzip.BadGzipFile, EOFError, zlib.error, ValueError) as error:
        raise MetadataMalformedError(
            f"Failed to parse layer metadata for '{layer_name}' at {metadata_file}: {error}. "
            "Repair or remove the corrupt metadata file."
        ) from error


def _create_parent_if_needed(metadata_file: Path) -> None:
    """Create the layer directory.

    Raises:
        MetadataDirectoryError: If the directory cannot be created.
    """
    parent_dir = metadata_file.parent
    try:
        parent_dir.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise MetadataDirectoryError(
            f"Unable to create layer metadata directory {parent_dir.resolve()}: {error}. "
            "Check that the metadata root is writable."
        ) from error
