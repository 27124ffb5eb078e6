"""Exceptions raised by fast_reactor.

Missing items are not errors: ReactiveList lookups report them through
return values (None / False) instead.
"""


class FastReactorError(Exception):
    """Base class for every error raised by fast_reactor."""


class InvalidOperationError(FastReactorError):
    """The operation is not valid for this reactive or its current value."""


class InvalidIndexError(FastReactorError, IndexError):
    """An index fell outside the range an operation accepts."""
