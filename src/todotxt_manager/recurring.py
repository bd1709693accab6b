"""
Recurrence patterns for todo.txt ``rec:`` values.

Supported patterns:

- ``<N>d``, ``<N>w``, ``<N>m``, ``<N>y``: add N days/weeks/months/years
- ``<N>w,mon,fri``: next listed weekday, wrapping N weeks ahead
- ``<N>m,1,15``: next listed day of month, wrapping N months ahead
- ``jan,1``: the given month and day, next year once it has passed

Month arithmetic never overflows: a day missing from the target month
resolves to that month's last day.
"""

import logging
import re
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from .exceptions import UnrecognizedPatternError
from .utils.datetime import parse_iso_date, to_iso

logger = logging.getLogger(__name__)


class RecurrenceType(Enum):
    """Types of recurrence patterns"""
    DAILY = "d"
    WEEKLY = "w"
    MONTHLY = "m"
    YEARLY = "y"
    WEEKDAYS = "weekdays"
    MONTH_DAYS = "month_days"
    ANNUAL_DATE = "annual_date"


# Sunday-first numbering, as written in rec: values
DAY_NAMES = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]
MONTH_NAMES = ["jan", "feb", "mar", "apr", "may", "jun",
               "jul", "aug", "sep", "oct", "nov", "dec"]

MAX_DAY_OF_MONTH = 31

REPEAT_OPTIONS = {
    "Daily": "rec:1d",
    "Weekly": "rec:1w,sun",
    "Monthly": "rec:1m,1",
    "Yearly": "rec:Jan,1",
}


@dataclass
class RecurrencePattern:
    """A parsed ``rec:`` value"""
    type: RecurrenceType
    interval: int = 1
    days_of_week: List[int] = field(default_factory=list)  # 0=Sunday, 6=Saturday
    days_of_month: List[int] = field(default_factory=list)  # 1-31
    month: Optional[int] = None  # 1-12
    day: Optional[int] = None


def sunday_weekday(value: date) -> int:
    """Weekday number with Sunday as 0."""
    return (value.weekday() + 1) % 7


def clamp_to_month(year: int, month: int, day: int) -> date:
    """Date for year/month/day, using the month's last day when ``day`` is past it."""
    last_day = monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def add_months(value: date, months: int, day: Optional[int] = None) -> date:
    """Move ``months`` ahead, keeping ``day`` (default: the current day) where it exists."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    return clamp_to_month(year, month, day if day is not None else value.day)


class RecurrenceParser:
    """Parses ``rec:`` pattern strings"""

    SIMPLE_RE = re.compile(r"^(\d+)([dwmy])$")
    INTERVAL_RE = re.compile(r"^(\d+)([wm])$")

    @staticmethod
    def day_name_to_number(day_name: str) -> int:
        """Convert a 3-letter day name to a number (0=Sunday), -1 if unknown"""
        name = day_name.strip().lower()
        return DAY_NAMES.index(name) if name in DAY_NAMES else -1

    @staticmethod
    def month_name_to_number(month_name: str) -> int:
        """Convert a 3-letter month name to a number (1=January), -1 if unknown"""
        name = month_name.strip().lower()
        return MONTH_NAMES.index(name) + 1 if name in MONTH_NAMES else -1

    @staticmethod
    def _parse_int(value: str) -> Optional[int]:
        value = value.strip()
        return int(value) if value.isdigit() else None

    @classmethod
    def parse(cls, pattern_str: str) -> Optional[RecurrencePattern]:
        """Parse a pattern, returning None when it is not understood"""
        pattern_str = (pattern_str or "").strip().lower()

        match = cls.SIMPLE_RE.match(pattern_str)
        if match:
            interval = int(match.group(1))
            if interval < 1:
                return None
            return RecurrencePattern(type=RecurrenceType(match.group(2)), interval=interval)

        parts = pattern_str.split(",")
        if len(parts) < 2:
            return None

        match = cls.INTERVAL_RE.match(parts[0])
        if match:
            interval = int(match.group(1))
            if interval < 1:
                return None
            if match.group(2) == "w":
                return cls._parse_weekdays(interval, parts[1:])
            return cls._parse_month_days(interval, parts[1:])

        return cls._parse_annual_date(parts)

    @classmethod
    def _parse_weekdays(cls, interval: int, names: List[str]) -> Optional[RecurrencePattern]:
        days = [cls.day_name_to_number(name) for name in names]
        if any(day < 0 for day in days):
            return None
        return RecurrencePattern(
            type=RecurrenceType.WEEKDAYS,
            interval=interval,
            days_of_week=sorted(set(days)),
        )

    @classmethod
    def _parse_month_days(cls, interval: int, values: List[str]) -> Optional[RecurrencePattern]:
        days = [cls._parse_int(value) for value in values]
        if any(day is None or day < 1 for day in days):
            return None
        return RecurrencePattern(
            type=RecurrenceType.MONTH_DAYS,
            interval=interval,
            days_of_month=sorted({min(day, MAX_DAY_OF_MONTH) for day in days}),
        )

    @classmethod
    def _parse_annual_date(cls, parts: List[str]) -> Optional[RecurrencePattern]:
        if len(parts) != 2:
            return None
        month = cls.month_name_to_number(parts[0])
        day = cls._parse_int(parts[1])
        if month < 0 or day is None or day < 1:
            return None
        return RecurrencePattern(
            type=RecurrenceType.ANNUAL_DATE,
            month=month,
            day=min(day, MAX_DAY_OF_MONTH),
        )


class RecurrenceCalculator:
    """Computes the next due date of a recurring task"""

    def next_occurrence(self, from_date: date, pattern: RecurrencePattern) -> date:
        """Calculate the occurrence following ``from_date``"""
        if pattern.type == RecurrenceType.DAILY:
            return from_date + timedelta(days=pattern.interval)
        elif pattern.type == RecurrenceType.WEEKLY:
            return from_date + timedelta(weeks=pattern.interval)
        elif pattern.type == RecurrenceType.MONTHLY:
            return add_months(from_date, pattern.interval)
        elif pattern.type == RecurrenceType.YEARLY:
            return add_months(from_date, 12 * pattern.interval)
        elif pattern.type == RecurrenceType.WEEKDAYS:
            return self._next_weekday_occurrence(from_date, pattern)
        elif pattern.type == RecurrenceType.MONTH_DAYS:
            return self._next_month_day_occurrence(from_date, pattern)
        elif pattern.type == RecurrenceType.ANNUAL_DATE:
            return self._next_annual_occurrence(from_date, pattern)

        return from_date

    def _next_weekday_occurrence(self, from_date: date, pattern: RecurrencePattern) -> date:
        """Next listed weekday; after the last one, the first one ``interval`` weeks on"""
        current_weekday = sunday_weekday(from_date)
        target_days = pattern.days_of_week

        for day in target_days:
            if day > current_weekday:
                return from_date + timedelta(days=day - current_weekday)

        days_ahead = pattern.interval * 7 - current_weekday + target_days[0]
        return from_date + timedelta(days=days_ahead)

    def _next_month_day_occurrence(self, from_date: date, pattern: RecurrencePattern) -> date:
        """Smallest listed day still ahead this month, else the first one ``interval`` months on"""
        for day in pattern.days_of_month:
            candidate = clamp_to_month(from_date.year, from_date.month, day)
            if candidate > from_date:
                return candidate

        return add_months(from_date, pattern.interval, day=pattern.days_of_month[0])

    def _next_annual_occurrence(self, from_date: date, pattern: RecurrencePattern) -> date:
        candidate = clamp_to_month(from_date.year, pattern.month, pattern.day)
        if candidate <= from_date:
            candidate = clamp_to_month(from_date.year + 1, pattern.month, pattern.day)
        return candidate


_calculator = RecurrenceCalculator()


def is_recognized_pattern(pattern: str) -> bool:
    return RecurrenceParser.parse(pattern) is not None


def calculate_next_due_date(current_due: date, pattern: str, strict: bool = False) -> date:
    """Next due date of a task recurring with ``pattern``.

    Args:
        current_due: The task's current due date
        pattern: A ``rec:`` value such as ``1w,mon,fri``
        strict: Raise instead of degrading on an unknown or out-of-range pattern

    Returns:
        The next due date. With ``strict=False`` an unrecognized pattern
        returns ``current_due`` unchanged.

    Raises:
        UnrecognizedPatternError: If ``strict`` is set and the pattern is not understood
            or its next date is past the supported date range
    """
    parsed = RecurrenceParser.parse(pattern)
    if parsed is None:
        if strict:
            raise UnrecognizedPatternError(pattern)
        logger.warning(f"Unrecognized recurrence pattern {pattern!r}; due date unchanged")
        return current_due

    try:
        next_due = _calculator.next_occurrence(current_due, parsed)
    except (OverflowError, ValueError) as e:
        # Interval lands outside the date range datetime can represent
        if strict:
            raise UnrecognizedPatternError(pattern) from e
        logger.warning(f"Recurrence {pattern!r} from {current_due} is out of range; due date unchanged")
        return current_due
    logger.debug(f"Recurrence {pattern!r}: {current_due} -> {next_due}")
    return next_due


def next_due_date_iso(current_due: str, pattern: str) -> Optional[str]:
    """ISO-string form used on task lines; None when either input is not understood"""
    parsed_due = parse_iso_date(current_due)
    if parsed_due is None:
        return None
    try:
        return to_iso(calculate_next_due_date(parsed_due, pattern, strict=True))
    except UnrecognizedPatternError as e:
        logger.debug(f"No next due date: {e}")
        return None


def repeat_syntax(option: str) -> str:
    """``rec:`` token for a repeat menu option (Daily/Weekly/Monthly/Yearly)"""
    return REPEAT_OPTIONS.get(option, "")
