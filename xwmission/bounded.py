#!/usr/bin/env python3
"""
Bounded Collections
===================

Ordered, index-addressable containers with a per-format capacity.

| Collection             | Minimum | Empty removal        | Remove last remaining   |
|------------------------|---------|----------------------|-------------------------|
| BoundedCollection      | 0       | CollectionEmpty      | collection becomes empty |
| FlightGroupCollection  | 1       | (never empty)        | re-initialized default  |
| MessageCollection      | 0       | CollectionEmpty      | collection becomes empty |
| FixedCollection        | limit   | (never empty)        | slot reset to default   |

Collections know nothing about cross-entity references; callers run the
integrity pass (see integrity.py) around structural edits.
"""

from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from .errors import CollectionEmpty, CollectionFull, WouldTruncate

T = TypeVar('T')


class BoundedCollection(Generic[T]):
    minimum = 0

    def __init__(self, limit: int, factory: Callable[[], T], items: Optional[List[T]] = None):
        self.limit = limit
        self.factory = factory
        self._items: List[T] = []
        for item in items or []:
            self.add(item)
        while len(self._items) < self.minimum:
            self._items.append(factory())

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __setitem__(self, index: int, item: T):
        self._items[index] = item

    def __eq__(self, other) -> bool:
        if isinstance(other, BoundedCollection):
            return self._items == other._items
        return NotImplemented

    def __repr__(self):
        return f"{type(self).__name__}({len(self._items)}/{self.limit})"

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.limit

    def index(self, item: T) -> int:
        return self._items.index(item)

    def add(self, item: Optional[T] = None) -> int:
        """Append an item (default when None) and return its index."""
        if self.is_full:
            raise CollectionFull(self.limit)
        self._items.append(self.factory() if item is None else item)
        return len(self._items) - 1

    def insert(self, index: int, item: Optional[T] = None) -> int:
        if index < 0 or index > len(self._items):
            raise IndexError(f"Insert index {index} outside 0..{len(self._items)}")
        if self.is_full:
            raise CollectionFull(self.limit)
        self._items.insert(index, self.factory() if item is None else item)
        return index

    def remove_at(self, index: int) -> int:
        """Remove the item at index and return the index to select next."""
        if not self._items:
            raise CollectionEmpty("Cannot remove from an empty collection")
        if index < 0 or index >= len(self._items):
            raise IndexError(f"Remove index {index} outside 0..{len(self._items) - 1}")
        if len(self._items) <= self.minimum:
            self._items[index] = self.factory()
            return index
        del self._items[index]
        if index == len(self._items):
            return index - 1
        return index

    def swap(self, a: int, b: int) -> bool:
        count = len(self._items)
        if a == b or not (0 <= a < count and 0 <= b < count):
            return False
        self._items[a], self._items[b] = self._items[b], self._items[a]
        return True

    def set_count(self, count: int, allow_truncate: bool = False):
        count = max(self.minimum, min(self.limit, count))
        if count < len(self._items):
            if not allow_truncate:
                raise WouldTruncate(len(self._items), count)
            del self._items[count:]
        while len(self._items) < count:
            self._items.append(self.factory())

    def clear(self):
        self._items = [self.factory() for _ in range(self.minimum)]

    def load(self, items: List[T]):
        """Replace the contents wholesale, as a decoder does."""
        if len(items) > self.limit:
            raise CollectionFull(self.limit)
        self._items = list(items)
        while len(self._items) < self.minimum:
            self._items.append(self.factory())


class FlightGroupCollection(BoundedCollection[T]):
    """Always holds at least one flight group."""
    minimum = 1

    def __init__(self, limit: int, factory: Callable[[], T], quantity: int = 1,
                 items: Optional[List[T]] = None):
        super().__init__(limit, factory, items)
        if items is None:
            self.set_count(max(1, min(limit, quantity)))


class MessageCollection(BoundedCollection[T]):
    def __init__(self, limit: int, factory: Callable[[], T], quantity: int = 0,
                 items: Optional[List[T]] = None):
        super().__init__(limit, factory, items)
        if items is None:
            self.set_count(max(0, min(limit, quantity)))


class FixedCollection(BoundedCollection[T]):
    """Teams, global goal sets and briefings: count is fixed by the format."""

    def __init__(self, count: int, factory: Callable[[], T], items: Optional[List[T]] = None):
        self.minimum = count
        super().__init__(count, factory, items)

    def insert(self, index: int, item: Optional[T] = None) -> int:
        raise CollectionFull(self.limit)
