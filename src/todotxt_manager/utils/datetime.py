"""Date utilities for todo.txt calendar dates.

todo.txt stores plain ``YYYY-MM-DD`` dates without time or timezone. These
helpers convert between those strings and :class:`datetime.date` and compute
the quick due-date shortcuts offered when adding a task.
"""

from datetime import date, datetime, timedelta
from typing import Optional

ISO_FORMAT = "%Y-%m-%d"

DUE_SHORTCUTS = ["Today", "Tomorrow", "Next Week", "Next Month"]


def today_local() -> date:
    """Return today's date in local time."""
    return datetime.now().date()


def to_iso(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return value.strftime(ISO_FORMAT)


def today_iso(today: Optional[date] = None) -> str:
    return to_iso(today or today_local())


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse ``YYYY-MM-DD`` into a date.
    
    Args:
        value: Date string, possibly None or malformed
        
    Returns:
        The date, or None if the string is not a real calendar date
    """
    if not value:
        return None
    try:
        return datetime.strptime(value, ISO_FORMAT).date()
    except ValueError:
        return None


def calculate_due_date(option: str, today: Optional[date] = None) -> str:
    """Resolve a due-date shortcut such as "Tomorrow" to an ISO date.
    
    "Next Week" is the coming Sunday (a full week ahead when today is a
    Sunday) and "Next Month" the first day of the following month. Unknown
    options resolve to today.
    """
    base = today or today_local()
    if option == "Tomorrow":
        target = base + timedelta(days=1)
    elif option == "Next Week":
        # weekday(): Monday=0 .. Sunday=6
        days_until_sunday = 7 if base.weekday() == 6 else 6 - base.weekday()
        target = base + timedelta(days=days_until_sunday)
    elif option == "Next Month":
        if base.month == 12:
            target = date(base.year + 1, 1, 1)
        else:
            target = date(base.year, base.month + 1, 1)
    else:
        target = base
    return to_iso(target)


def due_date_status(value: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """Classify a due date as "overdue", "today" or "upcoming"."""
    due = parse_iso_date(value)
    if due is None:
        return None
    base = today or today_local()
    if due < base:
        return "overdue"
    if due == base:
        return "today"
    return "upcoming"


def format_date(value: Optional[str], today: Optional[date] = None) -> Optional[str]:
    """Human friendly rendering: Today/Yesterday/Tomorrow, "Aug 3" or "Aug 3, 2024"."""
    parsed = parse_iso_date(value)
    if parsed is None:
        return value
    base = today or today_local()
    delta = (parsed - base).days
    if delta == 0:
        return "Today"
    if delta == -1:
        return "Yesterday"
    if delta == 1:
        return "Tomorrow"
    label = f"{parsed.strftime('%b')} {parsed.day}"
    if parsed.year != base.year:
        label += f", {parsed.year}"
    return label
