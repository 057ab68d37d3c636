"""Due-date urgency classification.

Urgency is a calendar-day concept: both dates are reduced to their day before
differencing, so a due date is "today" for the whole of that day regardless of
time zone drift or time-of-day.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

DateLike = Union[date, datetime]

DUE_SOON_DAYS = 3


class DueBucket(str, Enum):
    """Urgency buckets shown next to a task's due date."""
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_SOON = "due_soon"


def to_day(value: DateLike) -> date:
    """Strip the time of day from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until(due_date: DateLike, reference_date: DateLike) -> int:
    """Whole calendar days from ``reference_date`` to ``due_date`` (negative if past)."""
    return (to_day(due_date) - to_day(reference_date)).days


def is_past_due(due_date: DateLike, reference_date: DateLike, status: Optional[str] = None) -> bool:
    """Whether a task with this due date and status counts as overdue.

    Completed tasks are never overdue.
    """
    if status == "completed":
        return False
    return days_until(due_date, reference_date) < 0


def classify(
    due_date: DateLike,
    reference_date: DateLike,
    status: Optional[str] = None,
) -> Optional[DueBucket]:
    """Classify a due date relative to a reference date.

    Args:
        due_date: The task's due date
        reference_date: Usually today
        status: Task status; a completed task is never classified as overdue

    Returns:
        The urgency bucket, or None when no badge applies
    """
    diff_days = days_until(due_date, reference_date)

    if diff_days < 0:
        return DueBucket.OVERDUE if is_past_due(due_date, reference_date, status) else None
    if diff_days == 0:
        return DueBucket.DUE_TODAY
    if diff_days <= DUE_SOON_DAYS:
        return DueBucket.DUE_SOON
    return None
