"""Canonical query encoding and ordered field lists.

The canonical form sorts keys ascending and joins ``key=value`` pairs with
``&`` without any URL escaping. Escaping belongs to the transport layer.
"""
from __future__ import annotations
from typing import Any, Iterable, Iterator, Mapping, Tuple


def stringify_value(value: Any) -> str:
    """Render a scalar field value the way the remote service expects it.

    Booleans become "1"/"0", None becomes an empty string, everything else
    goes through ``str``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def canonical_encode(mapping: Mapping[str, Any]) -> str:
    """Serialize a mapping as a key-sorted, unescaped query string.

    Args:
        mapping: Field name to scalar value

    Returns:
        String such as ``a=1&b=2``
    """
    return "&".join(f"{key}={stringify_value(mapping[key])}" for key in sorted(mapping))


class OrderedFields:
    """Immutable, insertion-ordered list of wire fields.

    Used wherever the signature depends on field order, so that order is
    carried by the value itself instead of by dict construction habits.
    Field names must be unique.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Tuple[str, Any]] = ()):
        collected = []
        seen = set()
        for name, value in items:
            if name in seen:
                raise ValueError(f"Duplicate field name: {name}")
            seen.add(name)
            collected.append((name, value))
        self._items: Tuple[Tuple[str, Any], ...] = tuple(collected)

    def then(self, *items: Tuple[str, Any]) -> "OrderedFields":
        """Return a new list with ``items`` appended after the current fields."""
        return OrderedFields(self._items + tuple(items))

    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._items)

    def values(self) -> Tuple[Any, ...]:
        return tuple(value for _, value in self._items)

    def items(self) -> Tuple[Tuple[str, Any], ...]:
        return self._items

    def to_dict(self) -> dict:
        return dict(self._items)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return any(name == key for key, _ in self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedFields):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"OrderedFields({list(self._items)!r})"
