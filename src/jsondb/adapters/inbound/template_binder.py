"""Template binding: literal fragments plus values into a placeholder command.

A template is the list of literal text pieces that surround each value, the
same shape a tagged template literal has:

    fragments = ["SELECT * FROM photos WHERE id = ", " LIMIT 1"]
    values    = ["abc"]

binds to ``SELECT * FROM photos WHERE id = $1 LIMIT 1`` with ``("abc",)``.

Values are never written into the command text. They travel alongside it
and are looked up by placeholder index at execution time, so no value can
change the shape of the command.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from jsondb.domain.entities import Primitive
from jsondb.domain.errors import InvalidArgumentError


@dataclass(frozen=True)
class BoundCommand:
    """Command text with ``$N`` placeholders and the values they refer to."""

    text: str
    values: tuple[Primitive, ...]


def _is_ordered_sequence(obj: object) -> bool:
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray))


def bind_template(
    fragments: Sequence[str],
    values: Sequence[Primitive],
) -> BoundCommand:
    """Interleave fragments with ``$1``, ``$2``, ... placeholders.

    Args:
        fragments: Literal text pieces; exactly one more than ``values``.
        values: Parameter values in placeholder order.

    Returns:
        The bound command.

    Raises:
        InvalidArgumentError: If either argument is not an ordered sequence,
            a fragment is not a string, or the counts do not line up.

    Example:
        >>> bind_template(["SELECT * FROM t WHERE x = ", ""], [42])
        BoundCommand(text='SELECT * FROM t WHERE x = $1', values=(42,))
    """
    if not _is_ordered_sequence(fragments) or len(fragments) == 0:
        raise InvalidArgumentError("Template fragments must be a non-empty sequence of strings")
    if not all(isinstance(fragment, str) for fragment in fragments):
        raise InvalidArgumentError("Template fragments must all be strings")
    if not _is_ordered_sequence(values):
        raise InvalidArgumentError("Template values must be an ordered sequence")
    if len(fragments) != len(values) + 1:
        raise InvalidArgumentError(
            f"Template has {len(fragments) - 1} placeholder(s) but {len(values)} value(s)"
        )

    parts = [fragments[0]]
    for index, fragment in enumerate(fragments[1:], start=1):
        parts.append(f"${index}")
        parts.append(fragment)

    return BoundCommand(text="".join(parts), values=tuple(values))
