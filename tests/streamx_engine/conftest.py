"""Shared fixtures and instrumented helpers for stream tests.

Every helper here only uses the public ``streamx`` primitives.
"""

from __future__ import annotations

import threading

import pytest

from streamx import ElementKind, Stream

# ---------------------------------------------------------------------------
# Reusable instrumentation
# ---------------------------------------------------------------------------


class ReleaseCounter:
    """Close handler that counts how often it ran (thread-safe)."""

    def __init__(self):
        self.count = 0
        self._lock = threading.Lock()

    def __call__(self) -> None:
        with self._lock:
            self.count += 1


class FailingRelease:
    """Close handler that counts calls and then raises."""

    def __init__(self, exc: Exception | None = None):
        self.count = 0
        self.exc = exc or OSError("release failed")

    def __call__(self) -> None:
        self.count += 1
        raise self.exc


class Recorder:
    """Callable that records every element it is given (thread-safe)."""

    def __init__(self):
        self.seen: list = []
        self._lock = threading.Lock()

    def __call__(self, value) -> None:
        with self._lock:
            self.seen.append(value)


class AcquisitionCounter:
    """Factory body that counts acquisitions and hands out instrumented streams."""

    def __init__(self, *values, kind: ElementKind = ElementKind.GENERIC):
        self.values = values
        self.kind = kind
        self.acquired = 0
        self.releases: list[ReleaseCounter] = []

    def __call__(self) -> Stream:
        self.acquired += 1
        release = ReleaseCounter()
        self.releases.append(release)
        return Stream(self.values, self.kind).on_close(release)


def instrumented(*values, kind: ElementKind = ElementKind.GENERIC):
    """Return ``(stream, release_counter)`` for *values*."""
    release = ReleaseCounter()
    return Stream(values, kind).on_close(release), release


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def release():
    return ReleaseCounter()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def three_element_stream(release):
    """Stream of 'a', 'bb', 'ccc' releasing into the ``release`` fixture."""
    return Stream.of("a", "bb", "ccc").on_close(release)
