"""Unit tests for stream error types."""

from __future__ import annotations

import pytest

from streamx import StreamError, StreamStateError, UncheckedIOError, suppressed
from streamx.errors import add_suppressed


@pytest.mark.unit
class TestErrorHierarchy:
    def test_stream_error_is_exception(self):
        assert isinstance(StreamError("x"), Exception)

    def test_state_error_is_stream_error(self):
        assert isinstance(StreamStateError("used"), StreamError)

    def test_unchecked_io_error_is_stream_error(self):
        assert isinstance(UncheckedIOError(OSError("x")), StreamError)

    def test_unchecked_io_error_is_not_os_error(self):
        assert not isinstance(UncheckedIOError(OSError("x")), OSError)


@pytest.mark.unit
class TestUncheckedIOError:
    def test_stores_cause(self):
        cause = OSError("disk")
        assert UncheckedIOError(cause).cause is cause

    def test_message_names_cause_type(self):
        msg = str(UncheckedIOError(FileNotFoundError("gone")))
        assert "FileNotFoundError" in msg
        assert "gone" in msg


@pytest.mark.unit
class TestSuppressed:
    def test_empty_by_default(self):
        assert suppressed(ValueError("x")) == []

    def test_records_in_order_with_notes(self):
        primary = ValueError("primary")
        a, b = OSError("a"), OSError("b")
        add_suppressed(primary, a)
        add_suppressed(primary, b)
        assert suppressed(primary) == [a, b]
        assert primary.__notes__ == ["Suppressed: OSError: a", "Suppressed: OSError: b"]

    def test_self_suppression_is_ignored(self):
        primary = ValueError("x")
        add_suppressed(primary, primary)
        assert suppressed(primary) == []

    def test_returns_a_copy(self):
        primary = ValueError("x")
        add_suppressed(primary, OSError("a"))
        suppressed(primary).clear()
        assert len(suppressed(primary)) == 1
