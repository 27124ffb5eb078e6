"""Capability protocols shared by State, Computed and ReactiveList."""

from __future__ import annotations

from typing import Callable, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

Cleanup = Callable[[], None]


@runtime_checkable
class Dependent(Protocol):
    """Something that depends on observables and can be invalidated."""

    def invalidate(self) -> None:
        """Mark the current value stale so it is recalculated when next needed."""
        ...


@runtime_checkable
class Observable(Protocol):
    """Something dependents can attach to and detach from."""

    def add_dependent(self, dependent: Dependent) -> None: ...

    def remove_dependent(self, dependent: Dependent) -> None: ...


class Notifiable(Protocol):
    def notify_dependents(self) -> None:
        """Invalidate every dependent currently attached."""
        ...


@runtime_checkable
class Reactive(Observable, Notifiable, Protocol[T]):
    """A single current value that can be read, tracked and observed."""

    @property
    def value(self) -> T:
        """The current value. Reading is untracked, like peek()."""
        ...

    def get(self) -> T:
        """Read the value, registering a dependency when inside a tracked evaluation."""
        ...

    def read(self) -> T: ...

    def peek(self) -> T:
        """Read the value without tracking."""
        ...

    def set(self, value: T) -> None: ...

    def on_change(self, callback: Callable[[T], None]) -> Cleanup:
        """Register callback for value changes. Returns a function that removes it."""
        ...


@runtime_checkable
class WritableReactive(Reactive[T], Protocol[T]):
    def write(self, value: T) -> None:
        """Alias of set()."""
        ...
