"""Layer metadata exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Load failures carry a kind so callers can tell corrupt files from IO faults.
"""

from __future__ import annotations

from typing import Literal

LoadErrorKind = Literal["malformed", "io"]


class MetadataStoreError(Exception):
    """Base exception for all layer metadata failures."""


class MetadataConfigError(MetadataStoreError):
    """Raised for invalid runtime configuration."""


class MetadataLoadError(MetadataStoreError):
    """Raised when a persisted metadata file exists but cannot be loaded."""

    kind: LoadErrorKind = "io"


class MetadataMalformedError(MetadataLoadError):
    """Raised when a metadata file or stored value cannot be parsed."""

    kind: LoadErrorKind = "malformed"


class MetadataReadError(MetadataLoadError):
    """Raised when a metadata file cannot be read from disk."""

    kind: LoadErrorKind = "io"


class MetadataEncodeError(MetadataStoreError):
    """Raised when a metadata value cannot be percent-encoded."""


class MetadataWriteError(MetadataStoreError):
    """Raised when a metadata file cannot be written during a flush."""


class MetadataDirectoryError(MetadataStoreError):
    """Raised when a layer directory cannot be created."""
