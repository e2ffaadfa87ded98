"""Calendar view data — what the home week strip and month calendar show.

Builds plain data from the engine; drawing it is up to the front end.
Weeks start on Monday.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from slipup.engine import StreakEngine
from slipup.streaks import DayReport

WEEKDAY_LETTERS = ("M", "T", "W", "T", "F", "S", "S")

SUPER = "super"
WITHIN = "within"
BROKEN = "broken"


@dataclass(frozen=True)
class WeekDay:
    letter: str
    date: str
    slip_up_count: int
    max_slip_ups: int
    is_in_current_streak: bool
    should_show: bool
    is_before_tracking: bool


@dataclass(frozen=True)
class MonthDay:
    date: str
    day: int
    report: DayReport | None


def day_status(slip_ups: int, allowance: int) -> str:
    if slip_ups == 0:
        return SUPER
    if slip_ups <= allowance:
        return WITHIN
    return BROKEN


def remaining_percent(slip_ups: int, allowance: int) -> float:
    """Share of the day's allowance still unused, as the progress ring fill."""
    if slip_ups == 0:
        return 100.0
    if slip_ups > allowance or allowance <= 0:
        return 0.0
    return (allowance - slip_ups) / allowance * 100


def streak_headline(engine: StreakEngine) -> str:
    if engine.super_streak > 0:
        return f"Super Streak: {engine.super_streak} days"
    return f"Current Streak: {engine.streak} days"


def week_view(engine: StreakEngine) -> list[WeekDay]:
    """Monday..Sunday of the week containing effective today."""
    today = engine.effective_today()
    monday = today - timedelta(days=today.weekday())
    tracking_start = engine.record.tracking_start_date

    days = []
    for index, letter in enumerate(WEEKDAY_LETTERS):
        current = monday + timedelta(days=index)
        before_tracking = current < tracking_start
        days.append(WeekDay(
            letter=letter,
            date=current.isoformat(),
            slip_up_count=0 if before_tracking else engine.slip_ups_on(current),
            max_slip_ups=0 if before_tracking else engine.allowance_on(current),
            is_in_current_streak=not before_tracking and engine.is_in_current_streak(current),
            should_show=not before_tracking and engine.is_before_today(current),
            is_before_tracking=before_tracking,
        ))
    return days


def month_view(engine: StreakEngine, year: int, month: int) -> list[MonthDay | None]:
    """Month grid: None padding up to the first weekday, then every day.

    Days outside the tracking window (before tracking start or after
    effective today) have no report.
    """
    leading, days_in_month = calendar.monthrange(year, month)
    reports = {r.date: r for r in engine.streak_report()}

    cells: list[MonthDay | None] = [None] * leading
    for day in range(1, days_in_month + 1):
        iso = date(year, month, day).isoformat()
        cells.append(MonthDay(date=iso, day=day, report=reports.get(iso)))
    return cells
