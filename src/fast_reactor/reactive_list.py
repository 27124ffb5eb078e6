"""ReactiveList — an ordered reactive sequence with item-level events.

Three listener channels on top of dependent invalidation:
- on_item_added(value, index)
- on_item_removed(value, index)
- on_change(items) for the whole list

For a single mutation, item-level listeners always fire before dependents
are invalidated and whole-list listeners run. Bulk removals (clear, replace)
report items from the highest index down, so every reported index is still
valid for the listeners that receive it.

Reads (get, read, at, find, contains, len, iteration) are tracked; peek()
is not. Every read that returns the contents returns a copy.
"""

from __future__ import annotations

from typing import Callable, Generic, Iterable, Iterator, TypeVar

from fast_reactor._notify import (
    invalidate_dependents,
    is_same_value,
    notify_listeners,
    subscribe,
)
from fast_reactor._tracking import track_dependency
from fast_reactor.computed import Computed
from fast_reactor.errors import InvalidIndexError
from fast_reactor.types import Cleanup, Dependent

T = TypeVar("T")
R = TypeVar("R")

ItemListener = Callable[[T, int], None]


class ReactiveList(Generic[T]):
    """A reactive list that notifies dependents when its items change."""

    __slots__ = (
        "_items",
        "_dependents",
        "_listeners",
        "_add_listeners",
        "_remove_listeners",
    )

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._items: list[T] = list(items) if items is not None else []
        self._dependents: dict[Dependent, None] = {}
        self._listeners: dict[Callable[[list[T]], None], None] = {}
        self._add_listeners: dict[ItemListener, None] = {}
        self._remove_listeners: dict[ItemListener, None] = {}

    # --- Read operations ---

    @property
    def value(self) -> list[T]:
        return self.peek()

    @value.setter
    def value(self, items: Iterable[T]) -> None:
        self.set(items)

    def get(self) -> list[T]:
        """Tracked snapshot of the contents."""
        track_dependency(self)
        return list(self._items)

    def read(self) -> list[T]:
        return self.get()

    def peek(self) -> list[T]:
        """Untracked snapshot of the contents."""
        return list(self._items)

    def at(self, index: int) -> T | None:
        track_dependency(self)
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        """First item matching predicate, or None."""
        track_dependency(self)
        return next((item for item in self._items if predicate(item)), None)

    def contains(self, value: T) -> bool:
        track_dependency(self)
        return self._index_of(value) >= 0

    def size(self) -> int:
        track_dependency(self)
        return len(self._items)

    def __contains__(self, value: object) -> bool:
        track_dependency(self)
        return self._index_of(value) >= 0

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[T]:
        return iter(self.get())

    # --- Write operations ---

    def add(self, value: T) -> None:
        """Append value at the end."""
        index = len(self._items)
        self._items.append(value)
        self._item_added(value, index)
        self.on_items_changed()

    def insert(self, index: int, value: T) -> None:
        """Insert value before index. Valid indexes are 0 through len() inclusive."""
        if index < 0 or index > len(self._items):
            raise InvalidIndexError(f"Index out of bounds: {index}")
        self._items.insert(index, value)
        self._item_added(value, index)
        self.on_items_changed()

    def remove(self, value: T) -> bool:
        """Remove the first item matching value. Returns whether one was found.

        Matching is strict: numbers and strings by value, anything else by
        identity, so True does not match 1 and an equal copy of a dict does
        not match the dict.
        """
        index = self._index_of(value)
        if index < 0:
            return False
        item = self._items.pop(index)
        self._item_removed(item, index)
        self.on_items_changed()
        return True

    def remove_at(self, index: int) -> T | None:
        """Remove and return the item at index, or None when out of range."""
        if index < 0 or index >= len(self._items):
            return None
        item = self._items.pop(index)
        self._item_removed(item, index)
        self.on_items_changed()
        return item

    def update(self, index: int, value: T) -> bool:
        """Replace the item at index. Returns False when out of range."""
        if index < 0 or index >= len(self._items):
            return False
        self._items[index] = value
        self.on_items_changed()
        return True

    def pop(self) -> T | None:
        """Remove and return the last item, or None when empty."""
        if not self._items:
            return None
        item = self._items.pop()
        self._item_removed(item, len(self._items))
        self.on_items_changed()
        return item

    def shift(self) -> T | None:
        """Remove and return the first item, or None when empty."""
        if not self._items:
            return None
        item = self._items.pop(0)
        self._item_removed(item, 0)
        self.on_items_changed()
        return item

    def clear(self) -> None:
        """Remove everything. Silent when already empty."""
        if not self._items:
            return
        self._report_all_removed()
        self._items = []
        self.on_items_changed()

    def set(self, items: Iterable[T]) -> None:
        """Replace the contents: removes for the old items, adds for the new ones."""
        new_items = list(items)
        self._report_all_removed()
        self._items = new_items
        if self._add_listeners:
            for index, item in enumerate(list(new_items)):
                notify_listeners(self._add_listeners, item, index)
        self.on_items_changed()

    def replace(self, items: Iterable[T]) -> None:
        self.set(items)

    def write(self, items: Iterable[T]) -> None:
        self.set(items)

    def _index_of(self, value: T) -> int:
        for index, item in enumerate(self._items):
            if is_same_value(item, value):
                return index
        return -1

    def _report_all_removed(self) -> None:
        if not self._remove_listeners:
            return
        previous = list(self._items)
        for index in range(len(previous) - 1, -1, -1):
            notify_listeners(self._remove_listeners, previous[index], index)

    def _item_added(self, value: T, index: int) -> None:
        if self._add_listeners:
            notify_listeners(self._add_listeners, value, index)

    def _item_removed(self, value: T, index: int) -> None:
        if self._remove_listeners:
            notify_listeners(self._remove_listeners, value, index)

    # --- Notification ---

    def on_items_changed(self) -> None:
        """Invalidate dependents, then pass a snapshot to whole-list listeners."""
        if self._dependents:
            invalidate_dependents(self._dependents)
        if self._listeners:
            notify_listeners(self._listeners, self.peek())

    def add_dependent(self, dependent: Dependent) -> None:
        self._dependents[dependent] = None

    def remove_dependent(self, dependent: Dependent) -> None:
        self._dependents.pop(dependent, None)

    def notify_dependents(self) -> None:
        invalidate_dependents(self._dependents)

    def on_change(self, callback: Callable[[list[T]], None]) -> Cleanup:
        return subscribe(self._listeners, callback)

    def on_item_added(self, callback: ItemListener) -> Cleanup:
        return subscribe(self._add_listeners, callback)

    def on_item_removed(self, callback: ItemListener) -> Cleanup:
        return subscribe(self._remove_listeners, callback)

    # --- Derived computeds ---

    def map(self, selector: Callable[[T], R]) -> Computed[list[R]]:
        """A computed list applying selector to every item.

        Any mutation reruns selector over the whole list.
        """
        return Computed(lambda: [selector(item) for item in self.get()])

    def filter(self, predicate: Callable[[T], bool]) -> Computed[list[T]]:
        """A computed list of the items matching predicate."""
        return Computed(lambda: [item for item in self.get() if predicate(item)])

    def __repr__(self) -> str:
        return f"ReactiveList({self._items!r})"
