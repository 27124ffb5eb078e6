"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a function. Each evaluation runs under a tracking session,
so the set of reactives it reads is rebuilt from scratch every time: when a
branch stops reading a source, that source stops invalidating it.

Evaluation policy:
- LAZY (default): invalidation only marks the value dirty and passes the
  invalidation downstream. The function runs again on the next read, however
  many upstream changes happened in between.
- EAGER (change listeners attached, or force_eager set): invalidation
  recomputes immediately and fires listeners when the value changed.

The function runs once during construction to produce the first value.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from fast_reactor._notify import (
    invalidate_dependents,
    is_same_value,
    notify_listeners,
    subscribe,
)
from fast_reactor._tracking import track, track_dependency
from fast_reactor.errors import InvalidOperationError
from fast_reactor.types import Cleanup, Dependent, Observable

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)

_UNSET = object()

_SEQUENCE_ONLY = "This operation is only available on computed sequences"


class EvaluationPolicy(Enum):
    """When a Computed recalculates after being invalidated."""

    LAZY = "lazy"
    EAGER = "eager"


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = (
        "_fn",
        "_cached",
        "_dirty",
        "_dependencies",
        "_dependents",
        "_listeners",
        "_force_eager",
        "_policy",
    )

    def __init__(self, fn: Callable[[], T], *, force_eager: bool = False) -> None:
        self._fn = fn
        self._cached: Any = _UNSET
        self._dirty = True
        self._dependencies: set[Observable] = set()
        self._dependents: dict[Dependent, None] = {}
        self._listeners: dict[Callable[[T], None], None] = {}
        self._force_eager = force_eager
        self._policy = EvaluationPolicy.LAZY
        self._update_policy()
        self.peek()

    # --- Policy ---

    @property
    def policy(self) -> EvaluationPolicy:
        return self._policy

    @property
    def force_eager(self) -> bool:
        """Recompute immediately on invalidation even without listeners."""
        return self._force_eager

    @force_eager.setter
    def force_eager(self, force_eager: bool) -> None:
        self.set_force_eager(force_eager)

    def set_force_eager(self, force_eager: bool) -> None:
        """Toggle forced eager evaluation. Turning it on while dirty recomputes now."""
        self._force_eager = force_eager
        self._update_policy()
        if force_eager and self._dirty:
            self._refresh(self._cached)

    def _update_policy(self) -> None:
        if self._force_eager or self._listeners:
            self._policy = EvaluationPolicy.EAGER
        else:
            self._policy = EvaluationPolicy.LAZY

    # --- Reading ---

    @property
    def value(self) -> T:
        return self.peek()

    @value.setter
    def value(self, value: T) -> None:
        self.set(value)

    @property
    def dirty(self) -> bool:
        return self._dirty

    def get(self) -> T:
        """Read the value. If inside a tracked evaluation, registers the dependency."""
        track_dependency(self)
        return self.peek()

    def read(self) -> T:
        return self.get()

    def peek(self) -> T:
        """Read the value without tracking. Recomputes if dirty."""
        if self._dirty:
            self.recompute()
        return self._cached

    def set(self, value: T) -> None:
        raise InvalidOperationError(
            "Cannot set the value of a computed. The value is derived from its dependencies."
        )

    # --- Graph ---

    def recompute(self) -> None:
        """Re-evaluate the function, rebuilding the dependency set."""
        self._dirty = True
        self._clear_dependencies()
        try:
            tracked = track(self, self._fn)
        except Exception:
            logger.debug("Recompute of %r failed; value left dirty", self)
            raise
        self._dependencies = tracked.dependencies
        self._cached = tracked.result
        self._dirty = False

    def invalidate(self) -> None:
        """Mark dirty and pass the invalidation downstream.

        Under the EAGER policy the value is recomputed right away and
        listeners fire if it changed.
        """
        if self._dirty:
            return
        previous = self._cached
        self._dirty = True
        self.notify_dependents()
        if self._policy is EvaluationPolicy.EAGER:
            self._refresh(previous)

    def _refresh(self, previous: Any) -> None:
        # eager dependents may already have recomputed us during the cascade
        current = self.peek()
        if not is_same_value(previous, current):
            notify_listeners(self._listeners, current)

    def _clear_dependencies(self) -> None:
        for dependency in self._dependencies:
            dependency.remove_dependent(self)
        self._dependencies = set()

    def add_dependent(self, dependent: Dependent) -> None:
        self._dependents[dependent] = None

    def remove_dependent(self, dependent: Dependent) -> None:
        self._dependents.pop(dependent, None)

    def notify_dependents(self) -> None:
        invalidate_dependents(self._dependents)

    def on_change(self, callback: Callable[[T], None]) -> Cleanup:
        """Register callback for value changes. Attaching one makes this computed eager."""
        return subscribe(self._listeners, callback, self._update_policy)

    def dispose(self) -> None:
        """Disconnect from dependencies, dependents and listeners.

        The computed becomes dirty and re-attaches upstream on its next read.
        """
        self._clear_dependencies()
        self._dependents.clear()
        self._listeners.clear()
        self._dirty = True
        self._update_policy()
        logger.debug("Disposed %r", self)

    # --- Derived computeds ---

    def map(self, selector: Callable[[T], R]) -> Computed[R]:
        """A computed applying selector to this computed's value."""
        return Computed(lambda: selector(self.get()))

    def filter(self, predicate: Callable[[T], bool]) -> Computed[bool]:
        """A boolean computed testing predicate against this computed's value."""
        return Computed(lambda: bool(predicate(self.get())))

    def map_items(self, selector: Callable[[Any], R]) -> Computed[list[R]]:
        """A computed list applying selector to every item. Sequences only."""
        self._require_sequence()
        return Computed(lambda: [selector(item) for item in self.get()])

    def filter_items(self, predicate: Callable[[Any], bool]) -> Computed[list[Any]]:
        """A computed list of the items matching predicate. Sequences only."""
        self._require_sequence()
        return Computed(lambda: [item for item in self.get() if predicate(item)])

    def every(self, predicate: Callable[[Any], bool]) -> Computed[bool]:
        """True while every item matches predicate. Sequences only."""
        self._require_sequence()
        return Computed(lambda: all(predicate(item) for item in self.get()))

    def some(self, predicate: Callable[[Any], bool]) -> Computed[bool]:
        """True while any item matches predicate. Sequences only."""
        self._require_sequence()
        return Computed(lambda: any(predicate(item) for item in self.get()))

    def _require_sequence(self) -> None:
        if not isinstance(self.peek(), (list, tuple)):
            raise InvalidOperationError(_SEQUENCE_ONLY)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", repr(self._fn))
        state = "dirty" if self._dirty else f"cached={self._cached!r}"
        return f"Computed({name}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        price = State(10)

        @computed
        def with_tax():
            return price.get() * 1.08

        with_tax.get()  # 10.8
        price.set(20)
        with_tax.get()  # 21.6
    """
    return Computed(fn)
