"""Stream error types."""

from __future__ import annotations


class StreamError(Exception):
    """Base class for failures raised by the stream layer."""


class StreamStateError(StreamError):
    """A stream was used after it was linked, consumed or closed.

    Streams are once-consumable: after a stage or terminal operation has been
    applied, only the returned stream (if any) may be used.
    """


class UncheckedIOError(StreamError):
    """An ``OSError`` raised inside a callback or factory, translated.

    The original error is always kept as ``__cause__`` and is also exposed as
    ``cause`` for callers that prefer an explicit attribute.
    """

    def __init__(self, cause: OSError) -> None:
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


def add_suppressed(primary: BaseException, secondary: BaseException) -> None:
    """Record *secondary* on *primary* without replacing it.

    *primary* keeps propagating; *secondary* is listed by :func:`suppressed`
    and mentioned in a note so it shows up in tracebacks.
    """
    if secondary is primary:
        return
    primary.__dict__.setdefault("_suppressed", []).append(secondary)
    primary.add_note(f"Suppressed: {type(secondary).__name__}: {secondary}")


def suppressed(exc: BaseException) -> list[BaseException]:
    """Return the exceptions suppressed on *exc* (oldest first)."""
    return list(exc.__dict__.get("_suppressed", ()))
