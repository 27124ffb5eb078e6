"""Dependency tracking engine — records which reactives a computation reads.

A TrackingContext keeps a stack of frames, one per in-flight evaluation.
Every frame owns its own dependency set, so a computed that reads another
computed never mixes its reads with the inner one's.

Each thread gets its own default context, created on first use.
use_context() swaps in an isolated one for a block through a ContextVar, so
asyncio tasks and copy_context() runs see the override they started under.
A context is not thread-safe: one evaluation must finish before another
begins on it.
"""

from __future__ import annotations

import contextvars
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Generic, Iterator, TypeVar

if TYPE_CHECKING:
    from fast_reactor.types import Dependent, Observable

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tracked(Generic[T]):
    """Outcome of a tracking session."""

    dependencies: set[Observable]
    result: T


class _Frame:
    __slots__ = ("dependent", "dependencies")

    def __init__(self, dependent: Dependent) -> None:
        self.dependent = dependent
        self.dependencies: set[Observable] = set()


class TrackingContext:
    """A stack of tracking sessions."""

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[_Frame] = []

    @property
    def depth(self) -> int:
        """Number of tracking sessions currently open."""
        return len(self._frames)

    def get_current_dependent(self) -> Dependent | None:
        """The innermost dependent being evaluated, or None outside any session."""
        return self._frames[-1].dependent if self._frames else None

    def track(self, dependent: Dependent, fn: Callable[[], T]) -> Tracked[T]:
        """Run fn, attributing every tracked read to dependent.

        If fn raises, edges registered during the session are removed again
        and the error propagates.
        """
        frame = _Frame(dependent)
        self._frames.append(frame)
        try:
            result = fn()
        except BaseException:
            for observable in frame.dependencies:
                observable.remove_dependent(dependent)
            logger.debug(
                "Tracking session for %r failed; rolled back %d edge(s)",
                dependent, len(frame.dependencies),
            )
            raise
        finally:
            self._frames.pop()
        return Tracked(frame.dependencies, result)

    def track_dependency(self, observable: Observable) -> None:
        """Record that the current session read observable. No-op outside a session."""
        if not self._frames:
            return
        frame = self._frames[-1]
        frame.dependencies.add(observable)
        observable.add_dependent(frame.dependent)

    def __repr__(self) -> str:
        return f"TrackingContext(depth={len(self._frames)})"


_thread_default = threading.local()

_active_context: contextvars.ContextVar[TrackingContext | None] = contextvars.ContextVar(
    "fast_reactor_tracking_context", default=None
)


def get_context() -> TrackingContext:
    """The TrackingContext reads are currently attributed through."""
    context = _active_context.get()
    if context is not None:
        return context
    context = getattr(_thread_default, "context", None)
    if context is None:
        context = _thread_default.context = TrackingContext()
    return context


@contextmanager
def use_context(context: TrackingContext | None = None) -> Iterator[TrackingContext]:
    """Activate an isolated TrackingContext for the duration of the block.

    Usage:
        with use_context() as ctx:
            total = Computed(lambda: price.get() * quantity.get())
            assert ctx.depth == 0
    """
    if context is None:
        context = TrackingContext()
    token = _active_context.set(context)
    try:
        yield context
    finally:
        _active_context.reset(token)


def track(dependent: Dependent, fn: Callable[[], T]) -> Tracked[T]:
    return get_context().track(dependent, fn)


def track_dependency(observable: Observable) -> None:
    get_context().track_dependency(observable)


def get_current_dependent() -> Dependent | None:
    return get_context().get_current_dependent()
