"""Textual integration for fast_reactor. Opt-in — requires textual.

Widget-tree guards, NoMatches handling and thread marshaling are enforced
here, not at callsites. Core fast_reactor stays framework-agnostic.
Pause state is owned by this module and keyed by id(app); an id is present
exactly while its app is inside a pause() block.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, TypeVar

from textual.css.query import NoMatches

from fast_reactor.hydrate import assign, setter
from fast_reactor.observer import Observer
from fast_reactor.types import Cleanup, Reactive

T = TypeVar("T")

logger = logging.getLogger(__name__)

_paused_apps: set[int] = set()


@contextmanager
def pause(app) -> Iterator[None]:
    """Suspend guarded updates during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def _guard(app, callback: Callable[[T], None]) -> Callable[[T], None]:
    main = threading.get_ident()

    def _safe(value: T) -> None:
        try:
            callback(value)
        except NoMatches:
            logger.debug("Dropped update for %r: widget query matched nothing", app)

    def _guarded(value: T) -> None:
        if not is_safe(app):
            return
        if threading.get_ident() != main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    return _guarded


def watch(app, reactive: Reactive[T], callback: Callable[[T], None]) -> Observer:
    """Observer.watch() that safely bridges to Textual widgets.

    Skips updates while the app is paused or not running, drops NoMatches
    from widget queries, and marshals off-thread changes via call_from_thread.
    """
    return Observer.watch(reactive, _guard(app, callback))


def bind(app, target: Any, bindings: Mapping[str, Any]) -> Cleanup:
    """hydrate() for widgets: later changes are written only while the app is safe.

    Every binding is copied once immediately, like hydrate(), whether or not
    the app is running yet.

    Usage:
        cleanup = bind(app, self.query_one("#status", Static), {
            "tooltip": status_text,
            "disabled": is_loading,
        })
    """
    cleanups: list[Cleanup] = []

    for key, binding in bindings.items():
        if isinstance(binding, Reactive):
            assign(target, key, binding.peek())
            cleanups.append(binding.on_change(_guard(app, setter(target, key))))
        else:
            assign(target, key, binding)

    def _cleanup() -> None:
        for cleanup in cleanups:
            cleanup()

    return _cleanup
