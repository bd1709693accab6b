"""Tests for recurrence patterns and next-due-date calculation."""

from datetime import date

import pytest

from todotxt_manager.exceptions import UnrecognizedPatternError
from todotxt_manager.recurring import (
    RecurrenceParser,
    RecurrenceType,
    add_months,
    calculate_next_due_date,
    is_recognized_pattern,
    next_due_date_iso,
    repeat_syntax,
    sunday_weekday,
)


class TestRecurrenceParser:
    """Test parsing rec: values."""

    def test_simple_patterns(self):
        pattern = RecurrenceParser.parse("3d")
        assert pattern.type == RecurrenceType.DAILY
        assert pattern.interval == 3

        assert RecurrenceParser.parse("2w").type == RecurrenceType.WEEKLY
        assert RecurrenceParser.parse("1m").type == RecurrenceType.MONTHLY
        assert RecurrenceParser.parse("1y").type == RecurrenceType.YEARLY

    def test_weekday_pattern_sorted_and_deduplicated(self):
        pattern = RecurrenceParser.parse("1w,FRI,mon,sun,mon")

        assert pattern.type == RecurrenceType.WEEKDAYS
        assert pattern.days_of_week == [0, 1, 5]

    def test_month_day_pattern_clamps_to_31(self):
        pattern = RecurrenceParser.parse("2m,40,15")

        assert pattern.type == RecurrenceType.MONTH_DAYS
        assert pattern.interval == 2
        assert pattern.days_of_month == [15, 31]

    def test_annual_pattern(self):
        pattern = RecurrenceParser.parse("Jan,15")

        assert pattern.type == RecurrenceType.ANNUAL_DATE
        assert pattern.month == 1
        assert pattern.day == 15

    @pytest.mark.parametrize("value", [
        "", "d", "0d", "1q", "every week", "1w,funday", "1m,x", "1m,0", "foo,1", "jan,", "jan,1,2",
    ])
    def test_malformed_patterns(self, value):
        assert RecurrenceParser.parse(value) is None
        assert not is_recognized_pattern(value)


class TestCalculateNextDueDate:
    """Test next due date calculation."""

    def test_weekday_set_from_sunday(self):
        """2025-08-03 is a Sunday; Monday is next in {sun, mon, fri}."""
        assert calculate_next_due_date(date(2025, 8, 3), "1w,sun,mon,fri") == date(2025, 8, 4)

    def test_weekday_set_wraps_to_next_cycle(self):
        # Friday is the last listed day, so the cycle wraps to Sunday
        assert calculate_next_due_date(date(2025, 8, 8), "1w,sun,mon,fri") == date(2025, 8, 10)

    def test_weekday_between_targets(self):
        assert calculate_next_due_date(date(2025, 8, 5), "1w,mon,fri") == date(2025, 8, 8)

    @pytest.mark.parametrize("start,pattern,expected", [
        (date(2025, 8, 4), "2w,mon", date(2025, 8, 18)),
        (date(2025, 8, 8), "2w,mon,fri", date(2025, 8, 18)),
        (date(2025, 8, 9), "3w,sun", date(2025, 8, 24)),
    ])
    def test_multi_week_wrap(self, start, pattern, expected):
        """Wrapping lands on the first listed weekday of the cycle ``N`` weeks on."""
        result = calculate_next_due_date(start, pattern)

        assert result == expected
        assert sunday_weekday(result) == RecurrenceParser.parse(pattern).days_of_week[0]

    def test_simple_offsets(self):
        assert calculate_next_due_date(date(2025, 8, 3), "1d") == date(2025, 8, 4)
        assert calculate_next_due_date(date(2025, 8, 3), "2w") == date(2025, 8, 17)
        assert calculate_next_due_date(date(2025, 8, 3), "1m") == date(2025, 9, 3)
        assert calculate_next_due_date(date(2025, 12, 15), "1m") == date(2026, 1, 15)
        assert calculate_next_due_date(date(2025, 8, 3), "2y") == date(2027, 8, 3)

    def test_month_end_clamps(self):
        """Jan 31 plus one month is the last day of February."""
        assert calculate_next_due_date(date(2025, 1, 31), "1m") == date(2025, 2, 28)
        assert calculate_next_due_date(date(2024, 1, 31), "1m") == date(2024, 2, 29)

    def test_leap_day_yearly(self):
        assert calculate_next_due_date(date(2024, 2, 29), "1y") == date(2025, 2, 28)

    def test_single_month_day(self):
        assert calculate_next_due_date(date(2025, 1, 1), "1m,1") == date(2025, 2, 1)
        assert calculate_next_due_date(date(2025, 1, 10), "1m,15") == date(2025, 1, 15)
        assert calculate_next_due_date(date(2025, 1, 31), "1m,31") == date(2025, 2, 28)

    def test_multiple_month_days(self):
        assert calculate_next_due_date(date(2025, 1, 10), "1m,1,15") == date(2025, 1, 15)
        assert calculate_next_due_date(date(2025, 1, 20), "1m,1,15") == date(2025, 2, 1)
        assert calculate_next_due_date(date(2025, 11, 20), "3m,1,15") == date(2026, 2, 1)

    def test_month_day_past_short_month_end(self):
        # Feb has no 30th, so the 30th of Feb means Feb 28
        assert calculate_next_due_date(date(2025, 2, 10), "1m,30") == date(2025, 2, 28)

    def test_annual_date(self):
        assert calculate_next_due_date(date(2025, 3, 1), "jan,1") == date(2026, 1, 1)
        assert calculate_next_due_date(date(2025, 3, 1), "Dec,25") == date(2025, 12, 25)
        assert calculate_next_due_date(date(2025, 12, 25), "dec,25") == date(2026, 12, 25)

    def test_annual_leap_day(self):
        assert calculate_next_due_date(date(2024, 1, 1), "feb,29") == date(2024, 2, 29)
        assert calculate_next_due_date(date(2024, 3, 1), "feb,29") == date(2025, 2, 28)

    def test_unrecognized_pattern_returns_input(self):
        assert calculate_next_due_date(date(2025, 8, 3), "sometimes") == date(2025, 8, 3)

    def test_strict_mode_raises(self):
        with pytest.raises(UnrecognizedPatternError) as exc_info:
            calculate_next_due_date(date(2025, 8, 3), "sometimes", strict=True)
        assert exc_info.value.pattern == "sometimes"

    @pytest.mark.parametrize("pattern", ["9000y", "99999999d", "200000m", "5000000w"])
    def test_out_of_range_interval_returns_input(self, pattern):
        assert calculate_next_due_date(date(2025, 1, 1), pattern) == date(2025, 1, 1)

    @pytest.mark.parametrize("pattern", ["9000y", "99999999d", "200000m", "5000000w"])
    def test_out_of_range_interval_strict_raises(self, pattern):
        with pytest.raises(UnrecognizedPatternError):
            calculate_next_due_date(date(2025, 1, 1), pattern, strict=True)

    @pytest.mark.parametrize("pattern", ["1d", "1w,mon,wed", "2m,5,20", "mar,3", "1y"])
    def test_result_strictly_after_input(self, pattern):
        start = date(2025, 1, 1)
        for _ in range(30):
            following = calculate_next_due_date(start, pattern)
            assert following > start
            start = following


class TestHelpers:
    """Test the ISO wrappers and month arithmetic."""

    def test_next_due_date_iso(self):
        assert next_due_date_iso("2025-01-01", "1m,1") == "2025-02-01"
        assert next_due_date_iso("2025-13-01", "1m") is None
        assert next_due_date_iso("2025-01-01", "bogus") is None
        assert next_due_date_iso("2025-01-01", "9000y") is None

    def test_add_months_with_day(self):
        assert add_months(date(2025, 1, 15), 1, day=31) == date(2025, 2, 28)
        assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)

    def test_repeat_syntax(self):
        assert repeat_syntax("Daily") == "rec:1d"
        assert repeat_syntax("Weekly") == "rec:1w,sun"
        assert repeat_syntax("Monthly") == "rec:1m,1"
        assert repeat_syntax("Yearly") == "rec:Jan,1"
        assert repeat_syntax("Hourly") == ""
