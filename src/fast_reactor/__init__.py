"""fast_reactor: small reactive state graph with automatic dependency tracking."""

from importlib.metadata import version as _version

__version__ = _version("fast-reactor")

from fast_reactor._tracking import (
    Tracked,
    TrackingContext,
    get_context,
    get_current_dependent,
    track,
    track_dependency,
    use_context,
)
from fast_reactor.errors import FastReactorError, InvalidIndexError, InvalidOperationError
from fast_reactor.types import Cleanup, Dependent, Notifiable, Observable, Reactive, WritableReactive
from fast_reactor.computed import Computed, EvaluationPolicy, computed
from fast_reactor.state import State
from fast_reactor.reactive_list import ReactiveList
from fast_reactor.observer import Observer, watch
from fast_reactor.hydrate import hydrate
# textual NOT auto-imported — opt-in only

__all__ = [
    "State",
    "Computed",
    "computed",
    "EvaluationPolicy",
    "ReactiveList",
    "Observer",
    "watch",
    "hydrate",
    "TrackingContext",
    "Tracked",
    "use_context",
    "get_context",
    "track",
    "track_dependency",
    "get_current_dependent",
    "Observable",
    "Dependent",
    "Notifiable",
    "Reactive",
    "WritableReactive",
    "Cleanup",
    "FastReactorError",
    "InvalidOperationError",
    "InvalidIndexError",
]
