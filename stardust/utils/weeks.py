# stardust/utils/weeks.py
from calendar import monthrange
from datetime import date, timedelta
from typing import List, Optional, Tuple

WeekKey = Tuple[int, int]  # (iso week, iso year)


def iso_week(day: date) -> WeekKey:
    iso = day.isocalendar()
    return iso[1], iso[0]


def is_valid_week(week: int, year: int) -> bool:
    try:
        date.fromisocalendar(year, week, 1)
    except ValueError:
        return False
    return True


def week_range(week: int, year: int) -> Tuple[date, date]:
    """Monday and Sunday of an ISO week."""
    monday = date.fromisocalendar(year, week, 1)
    return monday, monday + timedelta(days=6)


def previous_week(week: int, year: int) -> WeekKey:
    monday, _ = week_range(week, year)
    return iso_week(monday - timedelta(days=7))


def weeks_in_month(month: int, year: int) -> List[WeekKey]:
    """ISO weeks whose Monday falls inside the calendar month.

    A week straddling two months belongs only to the month holding its Monday.
    """
    first = date(year, month, 1)
    last = date(year, month, monthrange(year, month)[1])
    monday = first + timedelta(days=(7 - first.weekday()) % 7)
    weeks = []
    while monday <= last:
        weeks.append(iso_week(monday))
        monday += timedelta(days=7)
    return weeks


def month_state(month: int, year: int, today: Optional[date] = None) -> str:
    """'past', 'current' or 'future' relative to today.

    A month is past only once the last week it owns has ended, which can be
    up to six days into the following calendar month.
    """
    today = today or date.today()
    if (year, month) > (today.year, today.month):
        return "future"
    _, last_sunday = week_range(*weeks_in_month(month, year)[-1])
    if today > last_sunday:
        return "past"
    return "current"
