"""Uniform traversal over collections of (possibly future) values.

A Traversal resolves the collection's shape once, at the boundary, and then
yields ``(value, key, collection)`` triples regardless of the source:

    - SEQUENCE: list/tuple/any Sequence; key is the index
    - MAPPING: dict/any Mapping; key is the mapping key
    - ITERABLE: generators and other lazy iterables; key is None
    - OBJECT: an object's own attributes (``vars(obj)``); key is the name

The shape also decides the shape of aggregated results: sequences and lazy
iterables aggregate into lists, mappings and objects into dicts.

Example:
    >>> for value, key, _ in Traversal.of({"a": 1, "b": 2}):
    ...     print(key, value)
    a 1
    b 2
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Shape(StrEnum):
    """How a collection is walked and what its aggregate looks like."""
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    ITERABLE = "iterable"
    OBJECT = "object"


Triple = tuple[Any, Hashable | None, Any]

# Iterable, but a string is a value rather than a collection of characters.
TEXT_TYPES: tuple[type, ...] = (str, bytes, bytearray)


def _reject_text(collection: object) -> None:
    if isinstance(collection, TEXT_TYPES):
        raise TypeError(f"cannot traverse {type(collection).__name__!r} object; wrap it in a list")


def detect_shape(collection: object) -> Shape:
    """Pick the traversal shape for a collection.

    Raises:
        TypeError: If collection is not iterable, or is text or bytes
    """
    _reject_text(collection)
    if isinstance(collection, Mapping):
        return Shape.MAPPING
    if isinstance(collection, Sequence):
        return Shape.SEQUENCE
    if isinstance(collection, Iterable):
        return Shape.ITERABLE
    raise TypeError(f"cannot traverse {type(collection).__name__!r} object")


def _check_shape(collection: object, shape: Shape) -> None:
    _reject_text(collection)
    ok = {
        Shape.SEQUENCE: lambda: isinstance(collection, Sequence),
        Shape.MAPPING: lambda: isinstance(collection, Mapping),
        Shape.ITERABLE: lambda: isinstance(collection, Iterable),
        Shape.OBJECT: lambda: hasattr(collection, "__dict__"),
    }[shape]()
    if not ok:
        raise TypeError(f"{type(collection).__name__!r} object cannot be traversed as {shape.value}")


@dataclass(slots=True, frozen=True)
class Traversal:
    """A collection paired with the strategy used to walk it.

    Attributes:
        collection: The original collection, passed through to callbacks
        shape: Resolved traversal shape
    """

    collection: Any
    shape: Shape

    @classmethod
    def of(cls, collection: object, shape: Shape | None = None) -> Traversal:
        """Build a traversal, detecting the shape unless one is forced."""
        if shape is None:
            return cls(collection, detect_shape(collection))
        _check_shape(collection, shape)
        return cls(collection, shape)

    @property
    def keyed(self) -> bool:
        """Whether results are keyed by name (dict) rather than position (list)."""
        return self.shape in (Shape.MAPPING, Shape.OBJECT)

    def __iter__(self) -> Iterator[Triple]:
        c = self.collection
        match self.shape:
            case Shape.SEQUENCE:
                for index, value in enumerate(c):
                    yield value, index, c
            case Shape.MAPPING:
                # Snapshot items so callbacks may mutate the mapping.
                for key, value in list(c.items()):
                    yield value, key, c
            case Shape.OBJECT:
                for key, value in list(vars(c).items()):
                    yield value, key, c
            case Shape.ITERABLE:
                for value in c:
                    yield value, None, c

    def slots(self) -> list[tuple[Hashable, Any, Hashable | None]]:
        """Materialize ``(slot, value, key)`` for aggregation.

        Slot is where the element's outcome lands in the result container:
        the key for keyed shapes, the position otherwise.
        """
        if self.keyed:
            return [(key, value, key) for value, key, _ in self]
        return [(pos, value, key) for pos, (value, key, _) in enumerate(self)]

    def container(self, slots: Sequence[tuple[Hashable, Any, Hashable | None]]) -> list[Any] | dict[Hashable, Any]:
        """Empty result of the matching shape, pre-sized to keep input order."""
        if self.keyed:
            return dict.fromkeys(slot for slot, _, _ in slots)
        return [None] * len(slots)


def traverse(collection: object, shape: Shape | None = None) -> Traversal:
    """Shorthand for Traversal.of()."""
    return Traversal.of(collection, shape)
