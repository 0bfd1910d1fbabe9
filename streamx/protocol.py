"""Structural protocol for the host stream capability."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Protocol, runtime_checkable

from .kinds import ElementKind


@runtime_checkable
class StreamProtocol(Protocol):
    """What the auto-closing decorator and the factories need from a stream.

    Any object exposing these members can be wrapped; :class:`~streamx.stream.Stream`
    is the bundled implementation.  Only the core of the vocabulary is
    declared here so ``isinstance(obj, StreamProtocol)`` stays a meaningful
    sanity check: the decorator forwards every other stage or terminal by
    name and lets the host raise if it lacks one.

    ``@runtime_checkable`` lets :func:`~streamx.autoclose.auto_closing`
    reject non-stream arguments early with a clear error.
    """

    kind: ElementKind

    def filter(self, predicate: Callable[[Any], bool]) -> "StreamProtocol": ...

    def map(self, mapper: Callable[[Any], Any]) -> "StreamProtocol": ...

    def for_each(self, action: Callable[[Any], Any]) -> None: ...

    def iterator(self) -> Iterator[Any]: ...

    def is_parallel(self) -> bool: ...

    def close(self) -> None: ...

    def __enter__(self) -> "StreamProtocol": ...

    def __exit__(self, *exc_info: Any) -> Any: ...
