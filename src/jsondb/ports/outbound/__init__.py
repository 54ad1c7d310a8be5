"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the storage the engine depends on.
"""

from jsondb.ports.outbound.document_store import DocumentStore

__all__ = [
    "DocumentStore",
]
