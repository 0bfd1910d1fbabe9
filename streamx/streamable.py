"""Streamable: a replayable factory of streams.

What an iterable is to an iterator, a ``Streamable`` is to a ``Stream``:
each ``stream()`` call runs the factory body again and returns a fresh,
independent stream (re-opening any resource the body opens).  Stages can be
stacked on the factory before any stream exists::

    lines = (
        IOStreamable(lambda: walk(root))
        .filter(is_text_file)
        .flat_map(io_function(read_lines))
    )

    lines.auto_closing_stream().for_each(print)   # one walk
    with lines.stream() as s:                      # another, independent walk
        s.for_each(print)

Stacking is purely structural: no stage runs, and nothing is opened, until
``stream()`` is called.  Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .autoclose import AutoClosingStream, auto_closing
from .errors import add_suppressed
from .failure import translating_io_errors
from .kinds import ElementKind
from .protocol import StreamProtocol
from .stream import Stream

logger = logging.getLogger(__name__)

Stage = Callable[[StreamProtocol], StreamProtocol]


def _discard(stream: StreamProtocol, exc: BaseException) -> None:
    """Close *stream* on an error path, keeping *exc* as the primary failure."""
    try:
        stream.close()
    except Exception as close_exc:
        add_suppressed(exc, close_exc)


class Streamable:
    """Zero-argument factory of streams with a stage-stacking API."""

    def __init__(
        self,
        source: Callable[[], StreamProtocol],
        kind: ElementKind = ElementKind.GENERIC,
    ) -> None:
        if not callable(source):
            raise TypeError(
                f"Streamable needs a zero-argument callable, got {type(source).__name__}"
            )
        self._source = source
        self.kind = kind

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, *values: Any, kind: ElementKind = ElementKind.GENERIC) -> "Streamable":
        return cls(lambda: Stream(values, kind), kind)

    @classmethod
    def from_iterable(
        cls, iterable: Iterable[Any], kind: ElementKind = ElementKind.GENERIC
    ) -> "Streamable":
        """Factory over a re-iterable collection (list, tuple, range, ...).

        One-shot iterators are rejected: the second ``stream()`` would see
        nothing.
        """
        if iter(iterable) is iterable:
            raise TypeError("from_iterable() needs a re-iterable, not an iterator")
        return cls(lambda: Stream(iterable, kind), kind)

    # ------------------------------------------------------------------
    # Producing streams
    # ------------------------------------------------------------------

    def stream(self) -> StreamProtocol:
        """Run the factory body and return a new stream with all stages applied.

        The produced stream must carry the factory's kind; otherwise it is
        closed and ``TypeError`` is raised.
        """
        logger.debug("Producing %s stream from %r", self.kind.value, self._source)
        produced = self._source()
        if produced.kind is not self.kind:
            exc = TypeError(
                f"{self!r} produced a {produced.kind.value} stream, "
                f"expected {self.kind.value}"
            )
            _discard(produced, exc)
            raise exc
        return produced

    def __call__(self) -> StreamProtocol:
        return self.stream()

    def auto_closing_stream(self) -> AutoClosingStream:
        """Like :meth:`stream`, wrapped so eager terminal operations close it."""
        return auto_closing(self.stream())

    # ------------------------------------------------------------------
    # Structural stages
    # ------------------------------------------------------------------

    def _then(self, stage: Stage, kind: Optional[ElementKind] = None) -> "Streamable":
        produce = self.stream

        def body() -> StreamProtocol:
            base = produce()
            try:
                return stage(base)
            except BaseException as exc:
                _discard(base, exc)
                raise

        return Streamable(body, kind or self.kind)

    def _require_numeric(self, operation: str) -> None:
        if not self.kind.is_numeric:
            raise TypeError(f"{operation}() is only available on numeric streamables")

    def filter(self, predicate: Callable[[Any], bool]) -> "Streamable":
        return self._then(lambda s: s.filter(predicate))

    def map(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.map(mapper))

    def map_to_obj(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.map_to_obj(mapper), ElementKind.GENERIC)

    def map_to_int(self, mapper: Callable[[Any], int]) -> "Streamable":
        return self._then(lambda s: s.map_to_int(mapper), ElementKind.INT)

    def map_to_long(self, mapper: Callable[[Any], int]) -> "Streamable":
        return self._then(lambda s: s.map_to_long(mapper), ElementKind.LONG)

    def map_to_float(self, mapper: Callable[[Any], float]) -> "Streamable":
        return self._then(lambda s: s.map_to_float(mapper), ElementKind.FLOAT)

    def flat_map(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.flat_map(mapper))

    def flat_map_to_int(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.flat_map_to_int(mapper), ElementKind.INT)

    def flat_map_to_long(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.flat_map_to_long(mapper), ElementKind.LONG)

    def flat_map_to_float(self, mapper: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.flat_map_to_float(mapper), ElementKind.FLOAT)

    def distinct(self) -> "Streamable":
        return self._then(lambda s: s.distinct())

    def sorted(
        self, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False
    ) -> "Streamable":
        return self._then(lambda s: s.sorted(key=key, reverse=reverse))

    def peek(self, action: Callable[[Any], Any]) -> "Streamable":
        return self._then(lambda s: s.peek(action))

    def limit(self, max_size: int) -> "Streamable":
        if max_size < 0:
            raise ValueError(f"limit must be >= 0, got {max_size}")
        return self._then(lambda s: s.limit(max_size))

    def skip(self, n: int) -> "Streamable":
        if n < 0:
            raise ValueError(f"skip must be >= 0, got {n}")
        return self._then(lambda s: s.skip(n))

    def boxed(self) -> "Streamable":
        self._require_numeric("boxed")
        return self._then(lambda s: s.boxed(), ElementKind.GENERIC)

    def as_long(self) -> "Streamable":
        return self._widen(ElementKind.LONG, lambda s: s.as_long())

    def as_float(self) -> "Streamable":
        return self._widen(ElementKind.FLOAT, lambda s: s.as_float())

    def _widen(self, kind: ElementKind, stage: Stage) -> "Streamable":
        if self.kind is kind or not self.kind.can_widen_to(kind):
            raise TypeError(f"cannot widen a {self.kind.value} streamable to {kind.value}")
        return self._then(stage, kind)

    def parallel(self) -> "Streamable":
        return self._then(lambda s: s.parallel())

    def sequential(self) -> "Streamable":
        return self._then(lambda s: s.sequential())

    def on_close(self, handler: Callable[[], Any]) -> "Streamable":
        return self._then(lambda s: s.on_close(handler))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value}>"


class IOStreamable(Streamable):
    """A :class:`Streamable` whose body may raise ``OSError``.

    The error is translated into :class:`~streamx.errors.UncheckedIOError`
    each time :meth:`stream` runs the body; factories stacked on top inherit
    the translation because they produce through this one.
    """

    def stream(self) -> StreamProtocol:
        with translating_io_errors():
            return super().stream()


def streamable(
    fn: Optional[Callable[[], StreamProtocol]] = None,
    *,
    kind: ElementKind = ElementKind.GENERIC,
) -> Any:
    """Decorator turning a zero-argument stream function into a :class:`Streamable`.

    Usable bare (``@streamable``) or with a kind
    (``@streamable(kind=ElementKind.INT)``).
    """
    if fn is None:
        return lambda f: Streamable(f, kind)
    return Streamable(fn, kind)


def io_streamable(
    fn: Optional[Callable[[], StreamProtocol]] = None,
    *,
    kind: ElementKind = ElementKind.GENERIC,
) -> Any:
    """Like :func:`streamable`, producing an :class:`IOStreamable`."""
    if fn is None:
        return lambda f: IOStreamable(f, kind)
    return IOStreamable(fn, kind)
