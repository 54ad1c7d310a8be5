"""Adapters layer - concrete implementations of port interfaces.

- Inbound adapters: command parsing and template binding
- Outbound adapters: the JSON file document store
"""

from jsondb.adapters.outbound import JsonFileStore

__all__ = [
    "JsonFileStore",
]
