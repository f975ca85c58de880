"""
Week Boundaries

A week runs from the configured first day (Sunday by default) through
the sixth day after it, both ends inclusive. The dashboard, the week
summary and the trends comparison all filter shifts through here, so
"this week" means the same thing everywhere.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from tiptrack.models.shift import Shift, WeekStart


def sunday_index(day: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def week_bounds(
    reference: Optional[date] = None,
    week_starts_on: WeekStart = WeekStart.SUNDAY,
    offset: int = 0,
) -> tuple[date, date]:
    """
    First and last day of the week containing `reference`.

    Args:
        reference: Any date in the week (defaults to today)
        week_starts_on: First day of the week
        offset: Whole weeks to move; -1 is last week

    Returns:
        (start, end), end = start + 6 days
    """
    reference = reference or date.today()
    back = (sunday_index(reference) - int(week_starts_on)) % 7
    start = reference - timedelta(days=back) + timedelta(weeks=offset)
    return start, start + timedelta(days=6)


def filter_shifts_in_range(
    shifts: Iterable[Shift],
    start: date,
    end: date,
) -> list[Shift]:
    """Shifts dated between start and end, inclusive. Order is kept."""
    return [s for s in shifts if start <= s.shift_date <= end]


def shifts_for_week(
    shifts: Iterable[Shift],
    reference: Optional[date] = None,
    week_starts_on: WeekStart = WeekStart.SUNDAY,
    offset: int = 0,
) -> list[Shift]:
    start, end = week_bounds(reference, week_starts_on, offset)
    return filter_shifts_in_range(shifts, start, end)
