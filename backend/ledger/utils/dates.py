"""
Calendar helpers for budgets, trends and recurring schedules.

Calendar-month arithmetic goes through dateutil's relativedelta, which clamps
to the last day of shorter months (Jan 31 + 1 month = Feb 28/29).
"""

import calendar
from datetime import date

from dateutil.relativedelta import relativedelta

FREQUENCY_INCREMENTS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "biweekly": relativedelta(weeks=2),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "yearly": relativedelta(years=1),
}


def frequency_increment(frequency, times=1):
    """
    Return the relativedelta covering ``times`` periods of ``frequency``.

    Raises:
        ValueError: If the frequency is unknown
    """
    try:
        step = FREQUENCY_INCREMENTS[frequency]
    except KeyError:
        raise ValueError(f"Unknown recurrence frequency: {frequency}")
    return step * times


def advance_until(base, frequency, today):
    """
    First occurrence strictly after ``base`` that is not before ``today``.

    One increment is added to the previous candidate at a time, so a month-end
    clamp carries forward (Jan 31 -> Feb 29 -> Mar 29).
    """
    step = frequency_increment(frequency)
    candidate = base + step
    while candidate < today:
        candidate = candidate + step
    return candidate


def month_bounds(year, month):
    """First and last day of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def next_month(year, month):
    """(year, month) of the following calendar month, wrapping December."""
    if month == 12:
        return year + 1, 1
    return year, month + 1


def trend_window_start(today, months):
    """First day of the month ``months - 1`` months before ``today``'s month."""
    return today.replace(day=1) - relativedelta(months=months - 1)
