"""hydrate() — copy reactive values onto a plain object and keep them live."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Callable, Mapping

from fast_reactor.types import Cleanup, Reactive


def assign(target: Any, key: str, value: Any) -> None:
    """Write value to target[key] for mappings, target.key otherwise."""
    if isinstance(target, MutableMapping):
        target[key] = value
    else:
        setattr(target, key, value)


def setter(target: Any, key: str) -> Callable[[Any], None]:
    def _set(value: Any) -> None:
        assign(target, key, value)

    return _set


def hydrate(target: Any, bindings: Mapping[str, Any]) -> Cleanup:
    """Bind fields of target to reactive values (State, Computed, ReactiveList) or constants.

    Reactive bindings are copied now and mirrored on every change. Anything
    else is copied once. Returns a function that removes every live binding.

    Usage:
        person = SimpleNamespace()
        first = State("John")
        full = Computed(lambda: f"{first.get()} Doe")

        cleanup = hydrate(person, {"name": first, "full_name": full, "kind": "person"})
        first.set("Jane")
        # person.full_name == "Jane Doe"
        cleanup()
    """
    cleanups: list[Cleanup] = []

    for key, binding in bindings.items():
        if isinstance(binding, Reactive):
            assign(target, key, binding.peek())
            cleanups.append(binding.on_change(setter(target, key)))
        else:
            assign(target, key, binding)

    def _cleanup() -> None:
        for cleanup in cleanups:
            cleanup()

    return _cleanup
