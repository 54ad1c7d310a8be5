"""Value comparison rules shared by WHERE, ORDER BY and MIN/MAX.

Values are compared by their natural ordering without coercion. Booleans
are never numbers here, even though ``bool`` subclasses ``int``.
"""

from __future__ import annotations

from typing import Any, Iterable


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without type coercion.

    ``1 == 1.0`` holds, ``1 == True`` and ``"1" == 1`` do not.
    ``None`` equals only ``None``.

    Example:
        >>> strict_equals(1, 1.0)
        True
        >>> strict_equals(1, True)
        False
    """
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def compare(left: Any, right: Any) -> int:
    """Three-way comparison for sorting.

    Returns 1, -1 or 0. ``None`` is greater than every other value, so a
    stable ascending sort puts rows lacking the column last and a reversed
    one puts them first, as Postgres does by default.

    Example:
        >>> sorted([3, None, 1], key=cmp_to_key(compare))
        [1, 3, None]

    Raises:
        TypeError: If the two values have no natural ordering between them.
    """
    if left is None:
        return 0 if right is None else 1
    if right is None:
        return -1
    if left > right:
        return 1
    if left < right:
        return -1
    return 0


def reduce_extreme(values: Iterable[Any], largest: bool) -> Any:
    """Null-safe MIN/MAX.

    The first non-null value seeds the accumulator; a later value replaces
    it only when strictly lesser (or greater, for ``largest``).

    Returns:
        The extreme value, or None if every value was None.
    """
    best: Any = None
    for value in values:
        if value is None:
            continue
        if best is None:
            best = value
        elif largest and value > best:
            best = value
        elif not largest and value < best:
            best = value
    return best
