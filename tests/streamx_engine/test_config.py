"""Unit tests for StreamConfig, ElementKind and SummaryStatistics."""

from __future__ import annotations

import pydantic
import pytest

from streamx import (
    ElementKind,
    Stream,
    StreamConfig,
    SummaryStatistics,
    default_config,
    set_default_config,
)


@pytest.mark.unit
class TestStreamConfig:
    def test_defaults(self):
        config = StreamConfig()
        assert config.max_workers == 4
        assert config.split_batch_size == 1024

    def test_rejects_non_positive_values(self):
        with pytest.raises(ValueError, match="max_workers"):
            StreamConfig(max_workers=0)
        with pytest.raises(ValueError, match="split_batch_size"):
            StreamConfig(split_batch_size=0)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STREAMX_MAX_WORKERS", "8")
        monkeypatch.setenv("STREAMX_SPLIT_BATCH_SIZE", " 16 ")
        assert StreamConfig.from_env() == StreamConfig(max_workers=8, split_batch_size=16)

    def test_from_env_ignores_unset(self, monkeypatch):
        monkeypatch.delenv("STREAMX_MAX_WORKERS", raising=False)
        monkeypatch.delenv("STREAMX_SPLIT_BATCH_SIZE", raising=False)
        assert StreamConfig.from_env() == StreamConfig()

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("STREAMX_MAX_WORKERS", "many")
        with pytest.raises(ValueError, match="STREAMX_MAX_WORKERS"):
            StreamConfig.from_env()

    def test_default_config_is_used_and_inherited(self):
        previous = default_config()
        custom = StreamConfig(max_workers=2)
        try:
            set_default_config(custom)
            derived = Stream.of(1).map(str)
            assert derived.config is custom
        finally:
            set_default_config(previous)


@pytest.mark.unit
class TestElementKind:
    def test_generic_is_identity(self):
        marker = object()
        assert ElementKind.GENERIC.coerce(marker) is marker

    @pytest.mark.parametrize(
        "kind, ok, too_big",
        [
            (ElementKind.INT, 2**31 - 1, 2**31),
            (ElementKind.LONG, 2**63 - 1, 2**63),
        ],
    )
    def test_integer_ranges(self, kind, ok, too_big):
        assert kind.coerce(ok) == ok
        assert kind.coerce(-ok - 1) == -ok - 1
        with pytest.raises(OverflowError):
            kind.coerce(too_big)

    def test_bool_is_integral(self):
        assert ElementKind.INT.coerce(True) == 1

    def test_widening_order(self):
        assert ElementKind.INT.can_widen_to(ElementKind.LONG)
        assert ElementKind.INT.can_widen_to(ElementKind.FLOAT)
        assert not ElementKind.FLOAT.can_widen_to(ElementKind.INT)
        assert not ElementKind.GENERIC.can_widen_to(ElementKind.FLOAT)

    def test_is_numeric(self):
        assert not ElementKind.GENERIC.is_numeric
        assert all(k.is_numeric for k in (ElementKind.INT, ElementKind.LONG, ElementKind.FLOAT))


@pytest.mark.unit
class TestSummaryStatistics:
    def test_empty(self):
        stats = SummaryStatistics.of([])
        assert stats.count == 0
        assert stats.min is None and stats.max is None
        assert stats.average is None

    def test_empty_sum_uses_start(self):
        assert SummaryStatistics.of([]).sum == 0
        empty_floats = SummaryStatistics.of([], 0.0)
        assert empty_floats.sum == 0.0
        assert isinstance(empty_floats.sum, float)

    def test_values(self):
        stats = SummaryStatistics.of([2.5, -1.0, 4.5])
        assert stats.min == -1.0
        assert stats.max == 4.5
        assert stats.average == pytest.approx(2.0)

    def test_is_frozen(self):
        stats = SummaryStatistics.of([1])
        with pytest.raises(pydantic.ValidationError):
            stats.count = 5

    def test_average_is_serialized(self):
        assert SummaryStatistics.of([1, 3]).model_dump()["average"] == 2.0
