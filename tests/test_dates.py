"""Tests for date helpers used by the digest and the feed."""

from datetime import date, datetime, timezone

import pytest

from devops_daily.utils.dates import (
    current_week,
    format_display_date,
    format_iso_date,
    format_rfc2822,
    generate_branch_name,
    is_within_last_days,
    to_iso_utc,
    try_parse_date,
    week_number,
)

UTC = timezone.utc


class TestWeekNumber:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2024, 1, 1), 1),  # Monday, Jan 1
            (date(2024, 1, 7), 1),
            (date(2024, 1, 8), 2),
            (date(2025, 1, 5), 1),  # Sunday, week started Dec 30
            (date(2025, 1, 6), 2),
            (date(2025, 11, 12), 46),
        ],
    )
    def test_monday_start_weeks(self, day: date, expected: int) -> None:
        assert week_number(day) == expected

    def test_late_december_rolls_into_next_years_week_one(self) -> None:
        # Jan 1 2026 is a Thursday, so Mon Dec 29 2025 already belongs to week 1
        assert week_number(date(2025, 12, 29)) == 1
        assert week_number(date(2025, 12, 28)) == 52

    def test_accepts_datetimes(self) -> None:
        assert current_week(datetime(2024, 1, 8, 23, 59, tzinfo=UTC)) == 2


class TestTryParseDate:
    def test_iso_with_z(self) -> None:
        assert try_parse_date("2025-11-10T10:00:00Z") == datetime(2025, 11, 10, 10, tzinfo=UTC)

    def test_rfc2822(self) -> None:
        parsed = try_parse_date("Mon, 10 Nov 2025 12:00:00 +0200")
        assert parsed == datetime(2025, 11, 10, 10, tzinfo=UTC)

    def test_date_only_is_midnight_utc(self) -> None:
        assert try_parse_date("2025-11-10") == datetime(2025, 11, 10, tzinfo=UTC)
        assert try_parse_date(date(2025, 11, 10)) == datetime(2025, 11, 10, tzinfo=UTC)

    def test_garbage_is_none(self) -> None:
        assert try_parse_date("not a date") is None
        assert try_parse_date("") is None


def test_to_iso_utc_uses_milliseconds_and_z() -> None:
    d = datetime(2025, 11, 10, 10, 0, 0, 123456, tzinfo=UTC)
    assert to_iso_utc(d) == "2025-11-10T10:00:00.123Z"


class TestIsWithinLastDays:
    now = datetime(2025, 11, 12, 12, tzinfo=UTC)

    def test_recent(self) -> None:
        assert is_within_last_days("2025-11-10T00:00:00Z", 7, now=self.now)

    def test_old(self) -> None:
        assert not is_within_last_days("2025-10-01T00:00:00Z", 7, now=self.now)

    def test_unparsable_is_not_recent(self) -> None:
        assert not is_within_last_days("soon", 7, now=self.now)


def test_format_display_date() -> None:
    assert format_display_date("2025-11-16T08:00:00Z") == "Nov 16, 2025"


def test_format_iso_date() -> None:
    assert format_iso_date(datetime(2025, 3, 4, 22, tzinfo=UTC)) == "2025-03-04"


def test_format_rfc2822() -> None:
    assert format_rfc2822(datetime(2025, 11, 10, 10, tzinfo=UTC)) == "Mon, 10 Nov 2025 10:00:00 GMT"


def test_generate_branch_name() -> None:
    assert generate_branch_name(2025, 46) == "news-2025-w46"
