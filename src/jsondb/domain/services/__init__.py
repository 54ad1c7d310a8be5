"""Domain services for the JSON database engine."""

from jsondb.domain.services.comparison import compare, reduce_extreme, strict_equals

__all__ = [
    "compare",
    "reduce_extreme",
    "strict_equals",
]
