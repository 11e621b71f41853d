"""Layer directory and metadata file path resolution."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from core.constants import LEGACY_METADATA_FILE_NAME, METADATA_FILE_NAME
from core.errors import MetadataStoreError
from core.types import LayerNameSanitizer

_DIRECTORY_SAFE_CHARACTERS = "-_."
_RESERVED_DIRECTORY_NAMES = (".", "..")


def filtered_layer_name(layer_name: str) -> str:
    """Convert a layer name into a filesystem-safe directory name.

    Every character outside ``[A-Za-z0-9._-]`` is percent-encoded, which
    keeps the mapping deterministic and injective.

    Args:
        layer_name: Layer identifier.

    Returns:
        Directory name for the layer.

    Raises:
        MetadataStoreError: If the name is empty or maps to a reserved entry.
    """
    directory_name = quote(layer_name, safe=_DIRECTORY_SAFE_CHARACTERS).replace("~", "%7E")
    if not directory_name or directory_name in _RESERVED_DIRECTORY_NAMES:
        raise MetadataStoreError(
            f"Layer name '{layer_name}' cannot be mapped to a metadata directory. "
            "Use a non-empty layer name other than '.' or '..'."
        )
    return directory_name


class LayerPaths:
    """Resolve per-layer metadata locations under a root directory."""

    def __init__(self, root: Path, sanitizer: LayerNameSanitizer = filtered_layer_name) -> None:
        self._root = root
        self._sanitizer = sanitizer

    @property
    def root(self) -> Path:
        return self._root

    def layer_directory(self, layer_name: str) -> Path:
        """Return the directory holding a layer's metadata files."""
        return self._root / self._sanitizer(layer_name)

    def metadata_file(self, layer_name: str) -> Path:
        """Return the current compressed metadata file path."""
        return self.layer_directory(layer_name) / METADATA_FILE_NAME

    def legacy_metadata_file(self, layer_name: str) -> Path:
        """Return the legacy uncompressed metadata file path."""
        return self.layer_directory(layer_name) / LEGACY_METADATA_FILE_NAME
