"""Layer metadata storage layer.

This module persists per-layer key/value metadata behind an in-memory cache.
Writes are queued and committed to disk by a background flusher.
"""
