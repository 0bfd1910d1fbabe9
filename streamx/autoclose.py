"""Auto-closing stream decorator.

``auto_closing(stream)`` returns a wrapper that closes the underlying stream
as soon as an eager terminal operation (``for_each``, ``reduce``, ``count``,
...) finishes, whether it returns or raises.  ``iterator()`` and
``spliterator()`` are lazy terminal operations: the wrapper cannot know when
the caller is done with the cursor, so it leaves the stream open and closing
it stays the caller's job.

Example::

    auto_closing(open_lines(path)).filter(str.strip).for_each(print)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from .errors import add_suppressed
from .kinds import ElementKind
from .protocol import StreamProtocol

logger = logging.getLogger(__name__)

_MISSING = object()


@contextmanager
def closing_after(stream: StreamProtocol) -> Iterator[StreamProtocol]:
    """Yield *stream* and close it exactly once when the block exits.

    If the block raises and ``close()`` raises too, the block's exception
    wins and the close failure is recorded on it as suppressed.  If only
    ``close()`` raises, that exception propagates.
    """
    try:
        yield stream
    except BaseException as exc:
        try:
            stream.close()
        except Exception as close_exc:
            add_suppressed(exc, close_exc)
        raise
    stream.close()
    logger.debug("Closed %r after terminal operation", stream)


class AutoClosingStream:
    """Wraps one stream for its whole lifetime.

    Stages delegate and re-wrap the result; a stage that hands back the very
    stream already wrapped (``parallel()``, ``on_close()``, ...) returns this
    same wrapper.  Eager terminals delegate inside :func:`closing_after`.
    Lazy terminals and queries delegate untouched.
    """

    __slots__ = ("_stream",)

    def __init__(self, stream: StreamProtocol) -> None:
        if not isinstance(stream, StreamProtocol):
            raise TypeError(
                f"auto_closing() needs a stream, got {type(stream).__name__}"
            )
        self._stream = stream

    @property
    def kind(self) -> ElementKind:
        return self._stream.kind

    @property
    def wrapped(self) -> StreamProtocol:
        """The decorated stream."""
        return self._stream

    def _wrap(self, result: StreamProtocol) -> "AutoClosingStream":
        return self if result is self._stream else AutoClosingStream(result)

    # ------------------------------------------------------------------
    # Stages: delegate + wrap
    # ------------------------------------------------------------------

    def filter(self, predicate: Callable[[Any], bool]) -> "AutoClosingStream":
        return self._wrap(self._stream.filter(predicate))

    def map(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.map(mapper))

    def map_to_obj(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.map_to_obj(mapper))

    def map_to_int(self, mapper: Callable[[Any], int]) -> "AutoClosingStream":
        return self._wrap(self._stream.map_to_int(mapper))

    def map_to_long(self, mapper: Callable[[Any], int]) -> "AutoClosingStream":
        return self._wrap(self._stream.map_to_long(mapper))

    def map_to_float(self, mapper: Callable[[Any], float]) -> "AutoClosingStream":
        return self._wrap(self._stream.map_to_float(mapper))

    def flat_map(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.flat_map(mapper))

    def flat_map_to_int(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.flat_map_to_int(mapper))

    def flat_map_to_long(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.flat_map_to_long(mapper))

    def flat_map_to_float(self, mapper: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.flat_map_to_float(mapper))

    def distinct(self) -> "AutoClosingStream":
        return self._wrap(self._stream.distinct())

    def sorted(
        self, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False
    ) -> "AutoClosingStream":
        return self._wrap(self._stream.sorted(key=key, reverse=reverse))

    def peek(self, action: Callable[[Any], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.peek(action))

    def limit(self, max_size: int) -> "AutoClosingStream":
        return self._wrap(self._stream.limit(max_size))

    def skip(self, n: int) -> "AutoClosingStream":
        return self._wrap(self._stream.skip(n))

    def boxed(self) -> "AutoClosingStream":
        return self._wrap(self._stream.boxed())

    def as_long(self) -> "AutoClosingStream":
        return self._wrap(self._stream.as_long())

    def as_float(self) -> "AutoClosingStream":
        return self._wrap(self._stream.as_float())

    def sequential(self) -> "AutoClosingStream":
        return self._wrap(self._stream.sequential())

    def parallel(self) -> "AutoClosingStream":
        return self._wrap(self._stream.parallel())

    def unordered(self) -> "AutoClosingStream":
        return self._wrap(self._stream.unordered())

    def on_close(self, handler: Callable[[], Any]) -> "AutoClosingStream":
        return self._wrap(self._stream.on_close(handler))

    # ------------------------------------------------------------------
    # Eager terminals: delegate + close
    # ------------------------------------------------------------------

    def for_each(self, action: Callable[[Any], Any]) -> None:
        with closing_after(self._stream) as s:
            s.for_each(action)

    def for_each_ordered(self, action: Callable[[Any], Any]) -> None:
        with closing_after(self._stream) as s:
            s.for_each_ordered(action)

    def to_list(self) -> list:
        with closing_after(self._stream) as s:
            return s.to_list()

    def reduce(
        self,
        op: Callable[[Any, Any], Any],
        identity: Any = _MISSING,
        combiner: Optional[Callable[[Any, Any], Any]] = None,
    ) -> Any:
        with closing_after(self._stream) as s:
            if identity is _MISSING:
                return s.reduce(op)
            return s.reduce(op, identity, combiner)

    def collect(
        self,
        collector: Callable[..., Any],
        accumulator: Optional[Callable[[Any, Any], Any]] = None,
        combiner: Optional[Callable[[Any, Any], Any]] = None,
    ) -> Any:
        with closing_after(self._stream) as s:
            return s.collect(collector, accumulator, combiner)

    def min(self, key: Optional[Callable[[Any], Any]] = None) -> Any:
        with closing_after(self._stream) as s:
            return s.min(key=key)

    def max(self, key: Optional[Callable[[Any], Any]] = None) -> Any:
        with closing_after(self._stream) as s:
            return s.max(key=key)

    def count(self) -> int:
        with closing_after(self._stream) as s:
            return s.count()

    def any_match(self, predicate: Callable[[Any], bool]) -> bool:
        with closing_after(self._stream) as s:
            return s.any_match(predicate)

    def all_match(self, predicate: Callable[[Any], bool]) -> bool:
        with closing_after(self._stream) as s:
            return s.all_match(predicate)

    def none_match(self, predicate: Callable[[Any], bool]) -> bool:
        with closing_after(self._stream) as s:
            return s.none_match(predicate)

    def find_first(self) -> Any:
        with closing_after(self._stream) as s:
            return s.find_first()

    def find_any(self) -> Any:
        with closing_after(self._stream) as s:
            return s.find_any()

    def sum(self) -> Any:
        with closing_after(self._stream) as s:
            return s.sum()

    def average(self) -> Optional[float]:
        with closing_after(self._stream) as s:
            return s.average()

    def summary_statistics(self) -> Any:
        with closing_after(self._stream) as s:
            return s.summary_statistics()

    # ------------------------------------------------------------------
    # Lazy terminals: delegate only, the caller closes
    # ------------------------------------------------------------------

    def iterator(self) -> Iterator[Any]:
        return self._stream.iterator()

    def __iter__(self) -> Iterator[Any]:
        return self.iterator()

    def spliterator(self) -> Any:
        return self._stream.spliterator()

    # ------------------------------------------------------------------
    # Query and release: delegate
    # ------------------------------------------------------------------

    def is_parallel(self) -> bool:
        return self._stream.is_parallel()

    def close(self) -> None:
        logger.debug("Explicit close of auto-closing %r", self._stream)
        self._stream.close()

    def __enter__(self) -> "AutoClosingStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"AutoClosingStream({self._stream!r})"


# ---------------------------------------------------------------------------
# Public wrap functions
# ---------------------------------------------------------------------------


def auto_closing(stream: StreamProtocol) -> AutoClosingStream:
    """Wrap *stream* so eager terminal operations close it."""
    if isinstance(stream, AutoClosingStream):
        return stream
    return AutoClosingStream(stream)


def _kind_checked(kind: ElementKind) -> Callable[[StreamProtocol], AutoClosingStream]:
    def wrap(stream: StreamProtocol) -> AutoClosingStream:
        if stream.kind is not kind:
            raise TypeError(
                f"expected a {kind.value} stream, got {stream.kind.value}"
            )
        return auto_closing(stream)

    wrap.__name__ = f"auto_closing_{kind.value}"
    wrap.__doc__ = f"Like :func:`auto_closing`, for {kind.value} streams only."
    return wrap


auto_closing_int = _kind_checked(ElementKind.INT)
auto_closing_long = _kind_checked(ElementKind.LONG)
auto_closing_float = _kind_checked(ElementKind.FLOAT)
