"""Shared typed models.

This module defines immutable result models and callable aliases used by
the store, flusher, and CLI layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

LayerNameSanitizer = Callable[[str], str]


@dataclass(frozen=True)
class FlushCycleResult:
    """Outcome of one write-back flush cycle.

    Attributes:
        unique_records: Distinct dirty records drained this cycle.
        committed: Layers whose metadata file was written.
        failed: Layers whose write failed and were re-enqueued.
        cas_retries: Commit attempts restarted by a concurrent mutation.
    """

    unique_records: int
    committed: tuple[str, ...]
    failed: tuple[str, ...]
    cas_retries: int

    @property
    def is_clean(self) -> bool:
        """Return whether every drained record was persisted."""
        return not self.failed
