"""Unit tests for site date parsing."""

import time
from datetime import date, datetime, timedelta, timezone

import pytest

from showtimes.utils.dates import (
    PACIFIC_TZ,
    is_showtime,
    parse_abbrev_date,
    parse_at_datetime,
    parse_clock,
    parse_compact_date,
    parse_date_token,
    parse_iso_date,
    parse_month_day,
    parse_pipe_date,
    parse_unix_timestamp,
    parse_weekday_month_day,
    resolve_year,
)

# 2025-08-01T00:00:00Z, which is still July 31 in Portland
AUG_1_UTC_MIDNIGHT = 1754006400

# A spread of calendar days across two years, including month and year ends
SAMPLE_DAYS = [date(2024, 1, 1) + timedelta(days=n) for n in range(0, 760, 17)] + [
    date(2024, 2, 29),
    date(2024, 12, 31),
    date(2025, 3, 9),
    date(2025, 11, 2),
]

# Timestamps either side of UTC midnight, where Pacific time is still the previous day
SAMPLE_TIMESTAMPS = [
    AUG_1_UTC_MIDNIGHT + offset
    for offset in range(-3 * 86400, 3 * 86400, 5 * 3600 + 7 * 60)
]


@pytest.fixture
def pacific_process_tz(monkeypatch: pytest.MonkeyPatch):
    """Run the test with the process timezone set to America/Los_Angeles."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


class TestResolveYear:
    def test_keeps_current_year_for_upcoming_date(self) -> None:
        assert resolve_year(9, 6, date(2025, 9, 1)) == date(2025, 9, 6)

    def test_rolls_into_next_year_after_year_end(self) -> None:
        assert resolve_year(1, 5, date(2025, 12, 20)) == date(2026, 1, 5)

    def test_yesterday_is_within_grace(self) -> None:
        assert resolve_year(12, 19, date(2025, 12, 20)) == date(2025, 12, 19)

    def test_two_days_ago_rolls_over(self) -> None:
        assert resolve_year(12, 18, date(2025, 12, 20)) == date(2026, 12, 18)

    def test_wider_grace_keeps_recent_dates(self) -> None:
        assert resolve_year(8, 2, date(2025, 8, 30), grace_days=30) == date(2025, 8, 2)

    def test_leap_day_resolves_to_next_leap_year(self) -> None:
        assert resolve_year(2, 29, date(2027, 1, 10)) == date(2028, 2, 29)


class TestStructuredDates:
    def test_compact_date(self) -> None:
        assert parse_compact_date("20251118") == date(2025, 11, 18)

    def test_compact_date_rejects_wrong_length(self) -> None:
        assert parse_compact_date("2025111") is None

    def test_compact_date_rejects_impossible_date(self) -> None:
        assert parse_compact_date("20251340") is None

    def test_iso_date_is_not_shifted_by_timezone(self) -> None:
        assert parse_iso_date("2025-08-02") == date(2025, 8, 2)

    def test_iso_date_with_time_suffix(self) -> None:
        assert parse_iso_date("2025-08-02T19:00:00Z") == date(2025, 8, 2)

    def test_unix_timestamp_in_pacific_time(self) -> None:
        assert parse_unix_timestamp(AUG_1_UTC_MIDNIGHT, PACIFIC_TZ) == date(2025, 7, 31)

    def test_unix_timestamp_in_utc(self) -> None:
        assert parse_unix_timestamp(str(AUG_1_UTC_MIDNIGHT), timezone.utc) == date(2025, 8, 1)

    def test_unix_timestamp_rejects_text(self) -> None:
        assert parse_unix_timestamp("soon", PACIFIC_TZ) is None


class TestPipeDates:
    def test_today_prefix(self) -> None:
        assert parse_pipe_date("Today | August 30", date(2025, 8, 30)) == date(2025, 8, 30)

    def test_bare_today(self) -> None:
        assert parse_pipe_date("Today", date(2025, 8, 30)) == date(2025, 8, 30)

    def test_recent_past_date_stays_in_current_year(self) -> None:
        assert parse_pipe_date("Saturday | August 02", date(2025, 8, 30)) == date(2025, 8, 2)

    def test_january_listing_seen_in_december(self) -> None:
        assert parse_pipe_date("Friday | January 02", date(2025, 12, 28)) == date(2026, 1, 2)

    def test_unknown_month(self) -> None:
        assert parse_pipe_date("Saturday | Smarch 02", date(2025, 8, 30)) is None


class TestTextualDates:
    def test_at_datetime(self) -> None:
        parsed = parse_at_datetime("Sunday, September 28 @ 3:00 PM", date(2025, 9, 1))
        assert parsed == (date(2025, 9, 28), "3:00 PM")

    def test_at_datetime_without_at_sign(self) -> None:
        assert parse_at_datetime("Sunday, September 28", date(2025, 9, 1)) is None

    def test_abbrev_date_without_space(self) -> None:
        assert parse_abbrev_date("Thu 4Sep", date(2025, 9, 1)) == date(2025, 9, 4)

    def test_abbrev_date_with_space(self) -> None:
        assert parse_abbrev_date("Wed 3 Sep", date(2025, 9, 1)) == date(2025, 9, 3)

    def test_month_day(self) -> None:
        assert parse_month_day("Sep 06", date(2025, 9, 1)) == date(2025, 9, 6)

    def test_weekday_month_day(self) -> None:
        assert parse_weekday_month_day("Wednesday, September 3", date(2025, 9, 1)) == date(2025, 9, 3)

    def test_today_with_short_month(self) -> None:
        assert parse_weekday_month_day("Today,  Aug 3", date(2025, 8, 3)) == date(2025, 8, 3)


class TestParseDateToken:
    TODAY = date(2025, 8, 30)

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            (date(2025, 9, 1), date(2025, 9, 1)),
            ("20250901", date(2025, 9, 1)),
            ("2025-09-01", date(2025, 9, 1)),
            ("Today | August 30", date(2025, 8, 30)),
            ("Monday, September 1 @ 7:00 PM", date(2025, 9, 1)),
            ("Mon 1Sep", date(2025, 9, 1)),
            ("Sep 01", date(2025, 9, 1)),
            ("Monday, September 1", date(2025, 9, 1)),
        ],
    )
    def test_supported_formats(self, token: object, expected: date) -> None:
        assert parse_date_token(token, self.TODAY, PACIFIC_TZ) == expected

    def test_numeric_timestamp_uses_given_timezone(self) -> None:
        assert parse_date_token(AUG_1_UTC_MIDNIGHT, self.TODAY, PACIFIC_TZ) == date(2025, 7, 31)

    def test_timestamp_string(self) -> None:
        assert parse_date_token(str(AUG_1_UTC_MIDNIGHT), self.TODAY, PACIFIC_TZ) == date(2025, 7, 31)

    def test_aware_datetime_converted_to_local_day(self) -> None:
        value = datetime(2025, 8, 1, 3, 0, tzinfo=timezone.utc)
        assert parse_date_token(value, self.TODAY, PACIFIC_TZ) == date(2025, 7, 31)

    @pytest.mark.parametrize("token", [None, True, "", "   ", "Coming soon", "TBA"])
    def test_unreadable_tokens(self, token: object) -> None:
        assert parse_date_token(token, self.TODAY, PACIFIC_TZ) is None


class TestClock:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("7:00p", (19, 0)),
            ("7:00pm", (19, 0)),
            ("3:00 PM", (15, 0)),
            ("12:15 AM", (0, 15)),
            ("12:30 PM", (12, 30)),
            ("19:30", (19, 30)),
        ],
    )
    def test_parse_clock(self, text: str, expected: tuple[int, int]) -> None:
        assert parse_clock(text) == expected

    @pytest.mark.parametrize("text", ["", "Buy tickets", "25:00", "13:00 pm", "7:75 PM"])
    def test_parse_clock_rejects(self, text: str) -> None:
        assert parse_clock(text) is None

    def test_is_showtime_with_meridiem(self) -> None:
        assert is_showtime("7:00 PM", require_meridiem=True)

    def test_is_showtime_requires_meridiem_when_asked(self) -> None:
        assert is_showtime("19:30")
        assert not is_showtime("19:30", require_meridiem=True)

    def test_is_showtime_rejects_labels(self) -> None:
        assert not is_showtime("Trailer")


# ---------------------------------------------------------------------------
# Process timezone independence
# ---------------------------------------------------------------------------


@pytest.mark.usefixtures("pacific_process_tz")
class TestNegativeOffsetProcess:
    @pytest.mark.parametrize("day", SAMPLE_DAYS, ids=str)
    def test_compact_date_is_never_shifted(self, day: date) -> None:
        assert parse_compact_date(day.strftime("%Y%m%d")) == day
        assert parse_date_token(day.strftime("%Y%m%d"), date(2025, 8, 30), PACIFIC_TZ) == day

    @pytest.mark.parametrize("day", SAMPLE_DAYS, ids=str)
    def test_iso_date_is_never_shifted(self, day: date) -> None:
        assert parse_iso_date(day.isoformat()) == day

    @pytest.mark.parametrize("timestamp", SAMPLE_TIMESTAMPS)
    def test_unix_timestamp_matches_local_conversion(self, timestamp: int) -> None:
        assert parse_unix_timestamp(timestamp) == datetime.fromtimestamp(timestamp).date()

    @pytest.mark.parametrize("timestamp", SAMPLE_TIMESTAMPS)
    def test_unix_timestamp_in_theatre_timezone_matches_process_timezone(self, timestamp: int) -> None:
        assert parse_unix_timestamp(timestamp, PACIFIC_TZ) == datetime.fromtimestamp(timestamp).date()

    def test_utc_midnight_is_previous_local_day(self) -> None:
        assert parse_unix_timestamp(AUG_1_UTC_MIDNIGHT) == date(2025, 7, 31)
