"""Observers — terminal subscribers that keep a reactive up to date.

Watching a Computed attaches a change listener to it, which switches it to
eager evaluation for as long as the observer is active.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from fast_reactor.types import Cleanup, Reactive

T = TypeVar("T")


class Observer:
    """Calls a callback with a reactive's value now and after every change."""

    __slots__ = ("_callback", "_cleanup", "_disposed")

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._cleanup: Cleanup | None = None
        self._disposed = False

    @classmethod
    def watch(cls, reactive: Reactive[T], callback: Callable[[T], None]) -> Observer:
        """Call callback with the current value, then again on every change.

        Usage:
            name = State("Ada")
            seen = []
            observer = Observer.watch(name, seen.append)
            # seen == ["Ada"]
            name.set("Grace")
            # seen == ["Ada", "Grace"]
            observer.dispose()
        """
        callback(reactive.peek())
        observer = cls(lambda: callback(reactive.peek()))
        observer._cleanup = reactive.on_change(observer._on_change)
        return observer

    @property
    def disposed(self) -> bool:
        return self._disposed

    def _on_change(self, _value: Any) -> None:
        self._callback()

    def dispose(self) -> None:
        """Stop observing. Safe to call more than once.

        A notification pass that already captured this observer still
        delivers to it; later passes do not.
        """
        if self._disposed:
            return
        self._disposed = True
        if self._cleanup is not None:
            self._cleanup()
            self._cleanup = None

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"Observer({state})"


def watch(reactive: Reactive[T], callback: Callable[[T], None]) -> Observer:
    """Shortcut for Observer.watch()."""
    return Observer.watch(reactive, callback)
