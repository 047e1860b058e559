# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Failure reporting capability for PropertyStore.

A PropertyStore that cannot complete a mutation either raises or hands back
a recoverable error value. Which one happens depends on the hosting
environment: when a structured-error factory has been registered here, the
store returns ``factory(code, message)``; otherwise the exception is raised.

The registry is looked up every time a failure is reported, so a host can
install or remove its factory at any moment.

Example:
    >>> from genro_propstore import PropertyStore, StructuredError
    >>> from genro_propstore.reporting import error_factory
    >>> store = PropertyStore().freeze()
    >>> with error_factory(StructuredError):
    ...     result = store.set('name', 'John')
    >>> bool(result), result.code
    (False, 'PropertyStore')
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

ErrorFactory = Callable[[str, str], Any]

_lock = threading.Lock()
_factory: ErrorFactory | None = None


class StructuredError:
    """Recoverable error value carrying a code and a message.

    Instances are falsy, so callers can write ``if not store.set(...)``
    when a factory producing them is registered.

    Example:
        >>> err = StructuredError('PropertyStore', 'This store has been frozen.')
        >>> bool(err)
        False
    """

    __slots__ = ('code', 'message')

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message

    def __bool__(self) -> bool:
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuredError):
            return NotImplemented
        return (self.code, self.message) == (other.code, other.message)

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __repr__(self) -> str:
        return f"StructuredError({self.code!r}, {self.message!r})"


def register_error_factory(factory: ErrorFactory) -> None:
    """Install the structured-error factory used by all stores.

    Args:
        factory: Callable taking ``(code, message)`` and returning the
            value a failed store call should return.
    """
    global _factory
    if not callable(factory):
        raise TypeError(f"error factory must be callable, not {type(factory).__name__}")
    with _lock:
        _factory = factory


def unregister_error_factory() -> ErrorFactory | None:
    """Remove the installed factory and return it (None if there was none)."""
    global _factory
    with _lock:
        previous, _factory = _factory, None
    return previous


def get_error_factory() -> ErrorFactory | None:
    """Return the installed factory, or None when stores should raise."""
    return _factory


@contextmanager
def error_factory(factory: ErrorFactory) -> Iterator[ErrorFactory]:
    """Temporarily install ``factory``, restoring the previous one on exit.

    The registry is process-wide: overlapping use from several threads may
    restore the wrong factory. Meant for single-threaded setup and test scopes.
    """
    global _factory
    with _lock:
        previous, _factory = _factory, factory
    try:
        yield factory
    finally:
        with _lock:
            _factory = previous
