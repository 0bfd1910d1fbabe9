"""Stream: lazy, once-consumable element sequence with close handlers.

This is the host capability the rest of the package decorates.  It is kept
deliberately small: stages build generators, terminals pull them, and
``close()`` runs the handlers registered anywhere along the chain.
"""

from __future__ import annotations

import builtins
import functools
import itertools
import logging
import sys
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, Iterator, Optional

from .config import StreamConfig, default_config
from .errors import StreamStateError, add_suppressed
from .kinds import ElementKind
from .protocol import StreamProtocol
from .stats import SummaryStatistics

logger = logging.getLogger(__name__)

_MISSING = object()


# ---------------------------------------------------------------------------
# Close handlers shared along a chain
# ---------------------------------------------------------------------------


class _CloseHandlers:
    """Close handlers for one chain of streams.

    Every stream derived from a source shares the source's instance, so
    closing the last stage releases whatever the first one opened.
    """

    def __init__(self) -> None:
        self._handlers: list[Callable[[], Any]] = []
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, handler: Callable[[], Any]) -> None:
        with self._lock:
            self._handlers.append(handler)

    def run(self) -> None:
        """Run every handler once, in registration order.

        All handlers run even when some fail.  The first failure is raised;
        later ones are attached to it as suppressed exceptions.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            handlers, self._handlers = self._handlers, []

        logger.debug("Closing stream chain (%d handler(s))", len(handlers))
        primary: Optional[Exception] = None
        for handler in handlers:
            try:
                handler()
            except Exception as exc:
                if primary is None:
                    primary = exc
                else:
                    logger.debug("Suppressing close handler failure: %r", exc)
                    add_suppressed(primary, exc)
        if primary is not None:
            raise primary


# ---------------------------------------------------------------------------
# Spliterator
# ---------------------------------------------------------------------------


class Spliterator:
    """Cursor over the remaining elements of a consumed stream.

    ``try_split()`` peels off a prefix batch into a new spliterator so the
    two halves can be traversed independently (e.g. on different threads).
    """

    def __init__(
        self,
        elements: Iterator[Any],
        kind: ElementKind = ElementKind.GENERIC,
        batch_size: int = 1024,
        size: Optional[int] = None,
    ) -> None:
        self._elements = elements
        self.kind = kind
        self._batch_size = batch_size
        self._size = size

    def try_advance(self, action: Callable[[Any], Any]) -> bool:
        """Feed the next element to *action*; False when exhausted."""
        value = next(self._elements, _MISSING)
        if value is _MISSING:
            self._size = 0
            return False
        if self._size is not None:
            self._size -= 1
        action(value)
        return True

    def for_each_remaining(self, action: Callable[[Any], Any]) -> None:
        for value in self._elements:
            action(value)
        self._size = 0

    def try_split(self) -> Optional["Spliterator"]:
        batch = list(itertools.islice(self._elements, self._batch_size))
        if not batch:
            return None
        if self._size is not None:
            self._size = builtins.max(self._size - len(batch), 0)
        return Spliterator(iter(batch), self.kind, self._batch_size, size=len(batch))

    def estimate_size(self) -> int:
        """Remaining element count, or ``sys.maxsize`` when unknown."""
        return sys.maxsize if self._size is None else self._size


# ---------------------------------------------------------------------------
# Stream
# ---------------------------------------------------------------------------


class Stream:
    """Lazy element sequence that can be consumed exactly once.

    Build from any iterable and chain stages::

        total = (
            Stream.of_ints(1, 2, 3, 4)
            .filter(lambda n: n % 2 == 0)
            .map(lambda n: n * 10)
            .sum()
        )

    Each stage links the receiver to the stream it returns; the receiver can
    no longer be used afterwards.  ``parallel()``, ``sequential()``,
    ``unordered()`` and ``on_close()`` configure the receiver in place and
    return it.

    A stream that owns a resource should register its release with
    ``on_close`` and be closed by the caller, typically via ``with``.
    """

    def __init__(
        self,
        source: Iterable[Any],
        kind: ElementKind = ElementKind.GENERIC,
        *,
        config: Optional[StreamConfig] = None,
    ) -> None:
        if kind.is_numeric:
            source = (kind.coerce(value) for value in source)
        self._setup(source, kind, config or default_config(), _CloseHandlers(), False)

    def _setup(
        self,
        source: Iterable[Any],
        kind: ElementKind,
        config: StreamConfig,
        handlers: _CloseHandlers,
        parallel: bool,
    ) -> None:
        self._source = source
        self.kind = kind
        self.config = config
        self._handlers = handlers
        self._parallel = parallel
        self._used = False

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, *values: Any, config: Optional[StreamConfig] = None) -> "Stream":
        return cls(values, config=config)

    @classmethod
    def of_ints(cls, *values: int, config: Optional[StreamConfig] = None) -> "Stream":
        return cls(values, ElementKind.INT, config=config)

    @classmethod
    def of_longs(cls, *values: int, config: Optional[StreamConfig] = None) -> "Stream":
        return cls(values, ElementKind.LONG, config=config)

    @classmethod
    def of_floats(cls, *values: float, config: Optional[StreamConfig] = None) -> "Stream":
        return cls(values, ElementKind.FLOAT, config=config)

    @classmethod
    def empty(cls, kind: ElementKind = ElementKind.GENERIC) -> "Stream":
        return cls((), kind)

    @classmethod
    def range(
        cls, start: int, stop: int, kind: ElementKind = ElementKind.INT
    ) -> "Stream":
        """Integers from *start* (inclusive) to *stop* (exclusive)."""
        if kind not in (ElementKind.INT, ElementKind.LONG):
            raise TypeError(f"range() needs an int or long kind, got {kind.value}")
        return cls(range(start, stop), kind)

    @classmethod
    def concat(cls, first: "Stream", second: "Stream") -> "Stream":
        """Elements of *first* followed by those of *second*.

        Closing the result closes both inputs.
        """
        if first.kind is not second.kind:
            raise TypeError(
                f"cannot concat a {first.kind.value} stream with a "
                f"{second.kind.value} stream"
            )
        head = first._consume()
        tail = second._consume()
        result = first._derive(itertools.chain(head, tail))
        result._handlers = _CloseHandlers()
        result._handlers.add(first._handlers.run)
        result._handlers.add(second._handlers.run)
        result._parallel = first._parallel or second._parallel
        return result

    # ------------------------------------------------------------------
    # Linkage bookkeeping
    # ------------------------------------------------------------------

    def _check_usable(self) -> None:
        if self._used or self._handlers.closed:
            raise StreamStateError("stream has already been operated upon or closed")

    def _consume(self) -> Iterator[Any]:
        """Mark this stream used and return a lazy iterator over its source."""
        self._check_usable()
        self._used = True
        source = self._source

        def elements() -> Iterator[Any]:
            yield from source

        return elements()

    def _derive(
        self, elements: Iterable[Any], kind: Optional[ElementKind] = None
    ) -> "Stream":
        """Build the successor stage; the caller has already consumed ``self``."""
        successor = object.__new__(type(self))
        successor._setup(
            elements, kind or self.kind, self.config, self._handlers, self._parallel
        )
        return successor

    def _require_numeric(self, operation: str) -> None:
        if not self.kind.is_numeric:
            raise TypeError(f"{operation}() is only available on numeric streams")

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def filter(self, predicate: Callable[[Any], bool]) -> "Stream":
        it = self._consume()
        return self._derive(value for value in it if predicate(value))

    def map(self, mapper: Callable[[Any], Any]) -> "Stream":
        return self._convert(mapper, self.kind)

    def map_to_obj(self, mapper: Callable[[Any], Any]) -> "Stream":
        return self._convert(mapper, ElementKind.GENERIC)

    def map_to_int(self, mapper: Callable[[Any], int]) -> "Stream":
        return self._convert(mapper, ElementKind.INT)

    def map_to_long(self, mapper: Callable[[Any], int]) -> "Stream":
        return self._convert(mapper, ElementKind.LONG)

    def map_to_float(self, mapper: Callable[[Any], float]) -> "Stream":
        return self._convert(mapper, ElementKind.FLOAT)

    def _convert(self, mapper: Callable[[Any], Any], kind: ElementKind) -> "Stream":
        it = self._consume()
        if kind.is_numeric:
            mapped = (kind.coerce(mapper(value)) for value in it)
        else:
            mapped = (mapper(value) for value in it)
        return self._derive(mapped, kind)

    def flat_map(self, mapper: Callable[[Any], Any]) -> "Stream":
        """Replace each element with the contents of ``mapper(element)``.

        The mapper may return a stream (closed once drained), any other
        iterable, or ``None`` for nothing.
        """
        return self._flatten(mapper, self.kind)

    def flat_map_to_int(self, mapper: Callable[[Any], Any]) -> "Stream":
        return self._flatten(mapper, ElementKind.INT)

    def flat_map_to_long(self, mapper: Callable[[Any], Any]) -> "Stream":
        return self._flatten(mapper, ElementKind.LONG)

    def flat_map_to_float(self, mapper: Callable[[Any], Any]) -> "Stream":
        return self._flatten(mapper, ElementKind.FLOAT)

    def _flatten(self, mapper: Callable[[Any], Any], kind: ElementKind) -> "Stream":
        it = self._consume()

        def flattened() -> Iterator[Any]:
            for value in it:
                inner = mapper(value)
                if inner is None:
                    continue
                if isinstance(inner, StreamProtocol):
                    with inner:
                        for item in inner.iterator():
                            yield kind.coerce(item)
                else:
                    for item in inner:
                        yield kind.coerce(item)

        return self._derive(flattened(), kind)

    def distinct(self) -> "Stream":
        """Drop repeated elements, keeping the first occurrence of each."""
        it = self._consume()

        def unique() -> Iterator[Any]:
            seen: set = set()
            # unhashable values (lists, dicts) fall back to equality scans
            seen_unhashable: list = []
            for value in it:
                try:
                    if value in seen:
                        continue
                    seen.add(value)
                except TypeError:
                    if value in seen_unhashable:
                        continue
                    seen_unhashable.append(value)
                yield value

        return self._derive(unique())

    def sorted(
        self, key: Optional[Callable[[Any], Any]] = None, reverse: bool = False
    ) -> "Stream":
        """Sort the elements; pass ``key=functools.cmp_to_key(cmp)`` for a comparator."""
        it = self._consume()

        def ordered() -> Iterator[Any]:
            yield from sorted(it, key=key, reverse=reverse)

        return self._derive(ordered())

    def peek(self, action: Callable[[Any], Any]) -> "Stream":
        it = self._consume()

        def observed() -> Iterator[Any]:
            for value in it:
                action(value)
                yield value

        return self._derive(observed())

    def limit(self, max_size: int) -> "Stream":
        if max_size < 0:
            raise ValueError(f"limit must be >= 0, got {max_size}")
        return self._derive(itertools.islice(self._consume(), max_size))

    def skip(self, n: int) -> "Stream":
        if n < 0:
            raise ValueError(f"skip must be >= 0, got {n}")
        return self._derive(itertools.islice(self._consume(), n, None))

    def boxed(self) -> "Stream":
        self._require_numeric("boxed")
        return self._derive(self._consume(), ElementKind.GENERIC)

    def as_long(self) -> "Stream":
        return self._widen(ElementKind.LONG)

    def as_float(self) -> "Stream":
        return self._widen(ElementKind.FLOAT)

    def _widen(self, kind: ElementKind) -> "Stream":
        if self.kind is kind or not self.kind.can_widen_to(kind):
            raise TypeError(f"cannot widen a {self.kind.value} stream to {kind.value}")
        it = self._consume()
        if kind is ElementKind.FLOAT:
            return self._derive((float(value) for value in it), kind)
        return self._derive(it, kind)

    # ------------------------------------------------------------------
    # In-place configuration
    # ------------------------------------------------------------------

    def sequential(self) -> "Stream":
        self._check_usable()
        self._parallel = False
        return self

    def parallel(self) -> "Stream":
        self._check_usable()
        self._parallel = True
        return self

    def unordered(self) -> "Stream":
        self._check_usable()
        return self

    def on_close(self, handler: Callable[[], Any]) -> "Stream":
        self._check_usable()
        self._handlers.add(handler)
        return self

    def is_parallel(self) -> bool:
        return self._parallel

    # ------------------------------------------------------------------
    # Eager terminal operations
    # ------------------------------------------------------------------

    def for_each(self, action: Callable[[Any], Any]) -> None:
        """Apply *action* to every element.

        On a parallel stream the calls are spread over a thread pool and
        their order is unspecified.  At most ``2 * max_workers`` elements are
        in flight, so the source is never drained ahead of the workers.
        """
        it = self._consume()
        if not self._parallel:
            for value in it:
                action(value)
            return
        window = self.config.max_workers * 2
        with ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="streamx"
        ) as pool:
            pending: set = set()
            for value in it:
                if len(pending) >= window:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        future.result()
                pending.add(pool.submit(action, value))
            for future in wait(pending).done:
                future.result()

    def for_each_ordered(self, action: Callable[[Any], Any]) -> None:
        for value in self._consume():
            action(value)

    def to_list(self) -> list:
        return list(self._consume())

    def reduce(
        self,
        op: Callable[[Any, Any], Any],
        identity: Any = _MISSING,
        combiner: Optional[Callable[[Any, Any], Any]] = None,
    ) -> Any:
        """Fold the elements with *op*.

        Without *identity* an empty stream reduces to ``None``.  *combiner*
        is accepted for API symmetry; sequential folding never needs it.
        """
        it = self._consume()
        if identity is not _MISSING:
            return functools.reduce(op, it, identity)
        first = next(it, _MISSING)
        if first is _MISSING:
            return None
        return functools.reduce(op, it, first)

    def collect(
        self,
        collector: Callable[..., Any],
        accumulator: Optional[Callable[[Any, Any], Any]] = None,
        combiner: Optional[Callable[[Any, Any], Any]] = None,
    ) -> Any:
        """Gather the elements into a result.

        ``collect(set)`` hands the element iterator to *collector*.
        ``collect(list, list.append)`` treats *collector* as a supplier of a
        mutable container that *accumulator* fills element by element.
        """
        it = self._consume()
        if accumulator is None:
            return collector(it)
        container = collector()
        for value in it:
            accumulator(container, value)
        return container

    def min(self, key: Optional[Callable[[Any], Any]] = None) -> Any:
        return builtins.min(self._consume(), key=key, default=None)

    def max(self, key: Optional[Callable[[Any], Any]] = None) -> Any:
        return builtins.max(self._consume(), key=key, default=None)

    def count(self) -> int:
        return builtins.sum(1 for _ in self._consume())

    def any_match(self, predicate: Callable[[Any], bool]) -> bool:
        return any(predicate(value) for value in self._consume())

    def all_match(self, predicate: Callable[[Any], bool]) -> bool:
        return all(predicate(value) for value in self._consume())

    def none_match(self, predicate: Callable[[Any], bool]) -> bool:
        return not any(predicate(value) for value in self._consume())

    def find_first(self) -> Any:
        return next(self._consume(), None)

    def find_any(self) -> Any:
        return next(self._consume(), None)

    def _zero(self) -> Any:
        return 0.0 if self.kind is ElementKind.FLOAT else 0

    def sum(self) -> Any:
        self._require_numeric("sum")
        return builtins.sum(self._consume(), self._zero())

    def average(self) -> Optional[float]:
        self._require_numeric("average")
        return SummaryStatistics.of(self._consume(), self._zero()).average

    def summary_statistics(self) -> SummaryStatistics:
        self._require_numeric("summary_statistics")
        return SummaryStatistics.of(self._consume(), self._zero())

    # ------------------------------------------------------------------
    # Lazy terminal operations
    # ------------------------------------------------------------------

    def iterator(self) -> Iterator[Any]:
        return self._consume()

    def __iter__(self) -> Iterator[Any]:
        return self.iterator()

    def spliterator(self) -> Spliterator:
        size = len(self._source) if isinstance(self._source, (tuple, list, range)) else None
        return Spliterator(
            self._consume(), self.kind, self.config.split_batch_size, size=size
        )

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._used = True
        self._handlers.run()

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "parallel" if self._parallel else "sequential"
        return f"<Stream kind={self.kind.value} {mode}>"
