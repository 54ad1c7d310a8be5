"""Outbound adapters - concrete implementations of outbound ports."""

from jsondb.adapters.outbound.json_file_store import JsonFileStore

__all__ = [
    "JsonFileStore",
]
