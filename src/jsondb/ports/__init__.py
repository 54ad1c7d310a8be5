"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts. Adapters
implement these ports with concrete functionality.
"""

from jsondb.ports.outbound import DocumentStore

__all__ = [
    "DocumentStore",
]
