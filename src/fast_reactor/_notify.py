"""Listener registries, change propagation and value comparison.

Registries are dicts used as insertion-ordered sets. Every notification pass
iterates a snapshot, so callbacks may subscribe or unsubscribe while a pass is
running: callbacks captured in the snapshot still fire, new ones wait for the
next pass. Callback errors are not caught and abort the remaining pass.
"""

from __future__ import annotations

from typing import Any, Callable

from fast_reactor.types import Cleanup, Dependent

_NUMBERS = frozenset({int, float})
_TEXT = frozenset({str, bytes})


def is_same_value(a: Any, b: Any) -> bool:
    """Strict equality: identity, or equal value for numbers and strings.

    Containers and other objects compare by identity only, so two equal but
    distinct lists count as different values. NaN never equals anything,
    not even the same NaN object.
    """
    type_a, type_b = type(a), type(b)
    if type_a in _NUMBERS and type_b in _NUMBERS:
        return a == b
    if a is b:
        return True
    if type_a is type_b and type_a in _TEXT:
        return a == b
    return False


def subscribe(
    registry: dict[Callable[..., None], None],
    callback: Callable[..., None],
    on_update: Callable[[], None] | None = None,
) -> Cleanup:
    """Add callback to registry. Returns an idempotent remover.

    on_update, when given, runs after every add and remove.
    """
    registry[callback] = None
    if on_update is not None:
        on_update()

    def _unsubscribe() -> None:
        registry.pop(callback, None)
        if on_update is not None:
            on_update()

    return _unsubscribe


def notify_listeners(registry: dict[Callable[..., None], None], *args: Any) -> None:
    for listener in list(registry):
        listener(*args)


def invalidate_dependents(dependents: dict[Dependent, None]) -> None:
    for dependent in list(dependents):
        dependent.invalidate()
