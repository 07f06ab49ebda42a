"""Adapters - I/O implementations of ports."""

from .json_store import JsonActivityStore, StorageError

__all__ = [
    "JsonActivityStore",
    "StorageError",
]
