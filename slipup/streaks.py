"""Streak derivation — pure functions over a HabitRecord.

Nothing here reads the clock or touches storage. Every function that needs
"today" takes the effective today as an argument (see effective_today()).
Streaks are recomputed from history on every call by walking backward one
day at a time from yesterday, so retroactive edits are always reflected.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from slipup.record import HabitRecord, format_day, parse_day

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DayReport:
    """One calendar day as the calendar views see it."""
    date: str
    slip_up_count: int
    max_slip_ups_for_day: int
    is_in_current_streak: bool


def effective_today(record: HabitRecord, real_today: date) -> date:
    """Real date, shifted by the simulated offset in development mode."""
    if record.development_mode:
        return real_today + timedelta(days=record.simulated_day_offset)
    return real_today


def slip_ups_on(record: HabitRecord, day) -> int:
    day = parse_day(day)
    if day < record.tracking_start_date:
        return 0
    entry = record.slip_up_history.get(day.isoformat())
    return entry.count if entry else 0


def allowance_on(record: HabitRecord, day) -> int:
    """Allowance frozen when the day was first logged, else the current one."""
    entry = record.slip_up_history.get(format_day(day))
    if entry is not None and entry.max_allowed is not None:
        return entry.max_allowed
    return record.daily_allowance


def _exceeded(record: HabitRecord, day: date) -> bool:
    return slip_ups_on(record, day) > allowance_on(record, day)


def is_before_today(record: HabitRecord, day, today: date) -> bool:
    day = parse_day(day)
    return record.tracking_start_date <= day < today


def last_streak_break(record: HabitRecord, today: date) -> date:
    """Most recent day before today that exceeded its allowance.

    Falls back to the tracking start date when no such day exists.
    """
    start = record.tracking_start_date
    cursor = today - ONE_DAY
    while cursor >= start:
        if _exceeded(record, cursor):
            return cursor
        cursor -= ONE_DAY
    return start


def is_in_current_streak(record: HabitRecord, day, today: date,
                         break_date: date | None = None) -> bool:
    day = parse_day(day)
    if not is_before_today(record, day, today):
        return False
    if break_date is None:
        break_date = last_streak_break(record, today)
    return day > break_date and not _exceeded(record, day)


def _walk_back(record: HabitRecord, today: date, qualifies) -> int:
    count = 0
    cursor = today - ONE_DAY
    while cursor >= record.tracking_start_date and qualifies(cursor):
        count += 1
        cursor -= ONE_DAY
    return count


def compute_streak(record: HabitRecord, today: date) -> int:
    """Consecutive days before today that stayed within their allowance."""
    return _walk_back(record, today, lambda day: not _exceeded(record, day))


def compute_super_streak(record: HabitRecord, today: date) -> int:
    """Consecutive days before today with no slip-ups at all."""
    return _walk_back(record, today, lambda day: slip_ups_on(record, day) == 0)


def streak_report(record: HabitRecord, start, end, today: date) -> list[DayReport]:
    """Per-day report from start to end inclusive. Empty if end < start."""
    start, end = parse_day(start), parse_day(end)
    break_date = last_streak_break(record, today)
    report = []
    cursor = start
    while cursor <= end:
        report.append(DayReport(
            date=cursor.isoformat(),
            slip_up_count=slip_ups_on(record, cursor),
            max_slip_ups_for_day=allowance_on(record, cursor),
            is_in_current_streak=is_in_current_streak(record, cursor, today, break_date),
        ))
        cursor += ONE_DAY
    return report
