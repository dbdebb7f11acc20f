"""Tests for the effective-duration rule and its helpers."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from blocklog.models.block import BlockStatus
from blocklog.services.duration import as_utc, effective_duration, elapsed_ms, mean_ms
from helpers import T0, at


class TestEffectiveDuration:
    def test_ongoing_is_zero_at_start(self) -> None:
        assert effective_duration(BlockStatus.ONGOING, T0, 0, T0) == 0

    def test_ongoing_tracks_reference_instant(self) -> None:
        assert effective_duration(BlockStatus.ONGOING, T0, 0, at(5000)) == 5000

    def test_ongoing_ignores_stale_stored_value(self) -> None:
        assert effective_duration(BlockStatus.ONGOING, T0, 123456, at(10)) == 10

    def test_ongoing_strictly_increases(self) -> None:
        readings = [effective_duration(BlockStatus.ONGOING, T0, 0, at(ms)) for ms in (1, 2, 1000, 86_400_000)]
        assert readings == sorted(readings)
        assert len(set(readings)) == len(readings)

    def test_ongoing_clamped_when_clock_behind_start(self) -> None:
        assert effective_duration(BlockStatus.ONGOING, T0, 0, at(-500)) == 0

    def test_resolved_returns_stored_value(self) -> None:
        assert effective_duration(BlockStatus.RESOLVED, T0, 9000, at(20_000)) == 9000
        assert effective_duration(BlockStatus.RESOLVED, T0, 9000, at(99_999_999)) == 9000

    def test_accepts_raw_status_string(self) -> None:
        assert effective_duration("resolved", T0, 42, at(1000)) == 42
        assert effective_duration("ongoing", T0, 42, at(1000)) == 1000

    def test_naive_start_is_treated_as_utc(self) -> None:
        naive = T0.replace(tzinfo=None)
        assert effective_duration(BlockStatus.ONGOING, naive, 0, at(750)) == 750


class TestHelpers:
    def test_elapsed_ms_spans_days(self) -> None:
        assert elapsed_ms(T0, at(2 * 86_400_000 + 1234)) == 2 * 86_400_000 + 1234

    def test_elapsed_ms_truncates_microseconds(self) -> None:
        end = T0.replace(microsecond=999)
        assert elapsed_ms(T0, end) == 0

    def test_as_utc_converts_offsets(self) -> None:
        plus_two = datetime(2026, 3, 10, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc(plus_two) == T0
        assert as_utc(plus_two).tzinfo is timezone.utc

    def test_as_utc_passes_none(self) -> None:
        assert as_utc(None) is None

    @pytest.mark.parametrize(
        "total,count,expected",
        [(0, 0, 0), (3000, 2, 1500), (1, 2, 1), (5, 3, 2), (7, 2, 4), (10, 4, 3)],
    )
    def test_mean_rounds_half_up(self, total: int, count: int, expected: int) -> None:
        assert mean_ms(total, count) == expected
