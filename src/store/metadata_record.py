"""In-memory layer metadata record.

A record pairs a layer's mutable mapping with a modification counter.
Writers bump the counter after each accepted change; the flusher resets it
with a compare-and-set that only succeeds when no write raced the commit.
"""

from __future__ import annotations

import threading


class ModificationCounter:
    """Integer counter with atomic increment and compare-and-set."""

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def get(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    def compare_and_set(self, expected: int, new_value: int) -> bool:
        """Set the value only if it still equals ``expected``.

        Args:
            expected: Value observed by the caller.
            new_value: Replacement value.

        Returns:
            True when the swap happened.
        """
        with self._lock:
            if self._value != expected:
                return False
            self._value = new_value
            return True


class LayerMetadataRecord:
    """Live metadata mapping for one layer.

    Identity is the layer name, so repeated queue entries for the same
    layer collapse into one commit per flush cycle.
    """

    def __init__(self, layer_name: str, data: dict[str, str] | None = None) -> None:
        self._layer_name = layer_name
        self._data: dict[str, str] = dict(data or {})
        self._modifications = ModificationCounter()

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def data(self) -> dict[str, str]:
        """Shared mapping of encoded values, mutated in place by writers."""
        return self._data

    @property
    def modifications(self) -> int:
        return self._modifications.get()

    @property
    def is_dirty(self) -> bool:
        return self._modifications.get() != 0

    def mark_modified(self) -> int:
        """Record one accepted mutation and return the new count."""
        return self._modifications.increment()

    def reset_modifications(self, expected: int) -> bool:
        """Reset the counter to zero if no mutation happened since ``expected``."""
        return self._modifications.compare_and_set(expected, 0)

    def snapshot(self) -> tuple[int, dict[str, str]]:
        """Return the observed counter and a copy of the mapping.

        The counter is read first: a write that lands after the read
        always bumps the counter past the observed value, so the
        following reset fails and the commit retries with fresh data.
        """
        observed = self._modifications.get()
        return observed, self._data.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayerMetadataRecord):
            return NotImplemented
        return self._layer_name == other._layer_name

    def __hash__(self) -> int:
        return hash(self._layer_name)

    def __repr__(self) -> str:
        return (
            f"LayerMetadataRecord(layer_name={self._layer_name!r}, "
            f"entries={len(self._data)}, modifications={self.modifications})"
        )
