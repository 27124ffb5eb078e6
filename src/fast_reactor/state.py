"""State — a mutable reactive cell, the leaf of the dependency graph.

Reading a State inside a Computed evaluation registers the dependency
automatically. Setting a different value invalidates every dependent first,
then calls change listeners in registration order. Setting the same value
does nothing.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from fast_reactor._notify import (
    invalidate_dependents,
    is_same_value,
    notify_listeners,
    subscribe,
)
from fast_reactor._tracking import track_dependency
from fast_reactor.computed import Computed
from fast_reactor.types import Cleanup, Dependent

T = TypeVar("T")
R = TypeVar("R")


class State(Generic[T]):
    """A single reactive value."""

    __slots__ = ("_value", "_dependents", "_listeners")

    def __init__(self, initial_value: T) -> None:
        self._value = initial_value
        self._dependents: dict[Dependent, None] = {}
        self._listeners: dict[Callable[[T], None], None] = {}

    @property
    def value(self) -> T:
        return self.peek()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    def get(self) -> T:
        """Read the value. If inside a tracked evaluation, registers the dependency."""
        track_dependency(self)
        return self._value

    def read(self) -> T:
        return self.get()

    def peek(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Write a new value. No-op when it is the same as the current one."""
        if is_same_value(self._value, value):
            return
        self._value = value
        self._changed(value)

    def write(self, value: T) -> None:
        self.set(value)

    def on_value_changed(self) -> None:
        """Run a change pass for the current value without modifying it."""
        self._changed(self._value)

    def _changed(self, value: T) -> None:
        invalidate_dependents(self._dependents)
        notify_listeners(self._listeners, value)

    def add_dependent(self, dependent: Dependent) -> None:
        self._dependents[dependent] = None

    def remove_dependent(self, dependent: Dependent) -> None:
        self._dependents.pop(dependent, None)

    def notify_dependents(self) -> None:
        invalidate_dependents(self._dependents)

    def on_change(self, callback: Callable[[T], None]) -> Cleanup:
        """Register callback for value changes. Returns a function that removes it."""
        return subscribe(self._listeners, callback)

    def map(self, selector: Callable[[T], R]) -> Computed[R]:
        """A computed applying selector to this state's value."""
        return Computed(lambda: selector(self.get()))

    def filter(self, predicate: Callable[[T], bool]) -> Computed[bool]:
        """A boolean computed testing predicate against this state's value."""
        return Computed(lambda: bool(predicate(self.get())))

    def __repr__(self) -> str:
        return f"State({self._value!r})"
