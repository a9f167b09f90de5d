# src/taskoff/tasks/recurrence.py

from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from .task_models import Recurrence


def _add_months(value: datetime, months: int) -> datetime:
    """Calendar month addition; the day is clamped to the length of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_due_date(date: datetime, recurrence: Recurrence) -> datetime:
    """
    Next occurrence after `date` for the given recurrence.

    - daily   -> +1 day
    - weekly  -> +7 days
    - monthly -> +1 calendar month (Jan 31 -> last day of February)
    - none    -> `date` unchanged

    Time of day and tzinfo are kept as-is.
    """
    if recurrence == Recurrence.DAILY:
        return date + timedelta(days=1)
    if recurrence == Recurrence.WEEKLY:
        return date + timedelta(days=7)
    if recurrence == Recurrence.MONTHLY:
        return _add_months(date, 1)
    return date
