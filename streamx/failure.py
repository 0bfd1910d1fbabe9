"""Translate ``OSError`` raised by callbacks into :class:`UncheckedIOError`.

Stream callbacks that touch files, sockets or directories fail with
``OSError``.  Wrapping them here turns that into the stream layer's own
error type at call time, with the original kept as the cause::

    Stream.of(*paths).flat_map(io_function(read_lines)).for_each(print)

Every other exception passes through unchanged.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from .errors import UncheckedIOError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@contextmanager
def translating_io_errors() -> Iterator[None]:
    """Re-raise any ``OSError`` from the block as :class:`UncheckedIOError`."""
    try:
        yield
    except OSError as exc:
        logger.debug("Translating %s raised in stream callback", type(exc).__name__)
        raise UncheckedIOError(exc) from exc


def io_function(fn: Callable[[T], R]) -> Callable[[T], R]:
    """Adapt a one-argument function (mapper) that may raise ``OSError``."""

    @functools.wraps(fn)
    def wrapper(value: T) -> R:
        with translating_io_errors():
            return fn(value)

    return wrapper


def io_consumer(fn: Callable[[T], Any]) -> Callable[[T], None]:
    """Adapt an action; its return value is discarded."""

    @functools.wraps(fn)
    def wrapper(value: T) -> None:
        with translating_io_errors():
            fn(value)

    return wrapper


def io_predicate(fn: Callable[[T], bool]) -> Callable[[T], bool]:
    @functools.wraps(fn)
    def wrapper(value: T) -> bool:
        with translating_io_errors():
            return bool(fn(value))

    return wrapper


def io_supplier(fn: Callable[[], R]) -> Callable[[], R]:
    """Adapt a zero-argument callable, e.g. the body of a stream factory."""

    @functools.wraps(fn)
    def wrapper() -> R:
        with translating_io_errors():
            return fn()

    return wrapper
