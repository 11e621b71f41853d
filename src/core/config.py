"""Runtime configuration model for the layer metadata store.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CACHE_EXPIRY_SECONDS,
    DEFAULT_DATA_ROOT,
    DEFAULT_FLUSH_INTERVAL_SECONDS,
    ENV_CACHE_EXPIRY,
    ENV_DATA_ROOT,
    ENV_FLUSH_INTERVAL,
    ENV_MAX_RW_ATTEMPTS,
    ENV_WAIT_AFTER_RENAME,
)
from core.errors import MetadataConfigError


@dataclass(frozen=True)
class MetadataStoreConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Root directory holding one subdirectory per layer.
        flush_interval_seconds: Delay between write-back flush cycles.
        cache_expiry_seconds: Idle time before a cached record is evicted.
        max_rw_attempts: Declared read/write attempt bound; not enforced.
        wait_after_rename_ms: Declared post-rename wait; not enforced.
    """

    data_root: Path
    flush_interval_seconds: float = DEFAULT_FLUSH_INTERVAL_SECONDS
    cache_expiry_seconds: float = DEFAULT_CACHE_EXPIRY_SECONDS
    max_rw_attempts: int | None = None
    wait_after_rename_ms: int | None = None

    @classmethod
    def from_env(cls) -> "MetadataStoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            MetadataConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv(ENV_DATA_ROOT, str(DEFAULT_DATA_ROOT))
        flush_interval = _parse_positive_float(
            ENV_FLUSH_INTERVAL,
            os.getenv(ENV_FLUSH_INTERVAL),
            DEFAULT_FLUSH_INTERVAL_SECONDS,
        )
        cache_expiry = _parse_positive_float(
            ENV_CACHE_EXPIRY,
            os.getenv(ENV_CACHE_EXPIRY),
            DEFAULT_CACHE_EXPIRY_SECONDS,
        )
        max_rw_attempts = _parse_optional_int(
            ENV_MAX_RW_ATTEMPTS, os.getenv(ENV_MAX_RW_ATTEMPTS), minimum=1
        )
        wait_after_rename = _parse_optional_int(
            ENV_WAIT_AFTER_RENAME, os.getenv(ENV_WAIT_AFTER_RENAME), minimum=0
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            flush_interval_seconds=flush_interval,
            cache_expiry_seconds=cache_expiry,
            max_rw_attempts=max_rw_attempts,
            wait_after_rename_ms=wait_after_rename,
        )


def _parse_positive_float(env_name: str, raw_value: str | None, default: float) -> float:
    """Parse a strictly positive float environment value.

    Args:
        env_name: Environment variable name for error messages.
        raw_value: Raw string from environment, or None when unset.
        default: Value used when the variable is unset.

    Returns:
        Parsed float.

    Raises:
        MetadataConfigError: If value is not a positive number.
    """
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = float(raw_value)
    except ValueError as error:
        raise MetadataConfigError(
            f"Invalid {env_name} value: expected number of seconds, got '{raw_value}'. "
            f"Set {env_name} to a positive numeric value."
        ) from error
    if value <= 0:
        raise MetadataConfigError(
            f"Invalid {env_name} value: expected a positive number, got '{raw_value}'."
        )
    return value


def _parse_optional_int(env_name: str, raw_value: str | None, minimum: int) -> int | None:
    """Parse an optional integer environment value with a lower bound.

    Args:
        env_name: Environment variable name for error messages.
        raw_value: Raw string from environment, or None when unset.
        minimum: Smallest accepted value.

    Returns:
        Parsed integer, or None when unset.

    Raises:
        MetadataConfigError: If value is not an integer at or above minimum.
    """
    if raw_value is None or not raw_value.strip():
        return None
    try:
        value = int(raw_value)
    except ValueError as error:
        raise MetadataConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value or unset it."
        ) from error
    if value < minimum:
        raise MetadataConfigError(
            f"Invalid {env_name} value: expected integer >= {minimum}, got {value}."
        )
    return value
