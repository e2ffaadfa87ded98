"""Tests for the week strip and month calendar data."""

from datetime import date

import pytest

from slipup.calendar_view import (
    BROKEN,
    SUPER,
    WITHIN,
    MonthDay,
    day_status,
    month_view,
    remaining_percent,
    streak_headline,
    week_view,
)
from slipup.engine import StreakEngine
from slipup.storage import MemoryStorage
from slipup.store import HabitStore

TODAY = date(2024, 3, 1)  # a Friday


@pytest.fixture
def engine():
    store = HabitStore(MemoryStorage(), key="habit-store", clock=lambda: TODAY,
                       development_mode=False)
    store.set_habit_name("Smoking")
    store.set_daily_allowance(3)
    store.restore_history(
        {"2024-02-28": {"count": 5, "maxAllowed": 3}, "2024-02-29": {"count": 1, "maxAllowed": 3}},
        "2024-02-28",
    )
    return StreakEngine(store)


class TestDayStatus:
    def test_statuses(self):
        assert day_status(0, 3) == SUPER
        assert day_status(0, 0) == SUPER
        assert day_status(2, 3) == WITHIN
        assert day_status(3, 3) == WITHIN
        assert day_status(4, 3) == BROKEN
        assert day_status(1, 0) == BROKEN

    def test_remaining_percent(self):
        assert remaining_percent(0, 3) == 100.0
        assert remaining_percent(0, 0) == 100.0
        assert remaining_percent(1, 4) == 75.0
        assert remaining_percent(4, 4) == 0.0
        assert remaining_percent(5, 4) == 0.0
        assert remaining_percent(1, 0) == 0.0


class TestHeadline:
    def test_current_streak(self, engine):
        assert streak_headline(engine) == "Current Streak: 1 days"

    def test_super_streak_preferred(self, engine):
        engine.store.restore_history({}, "2024-02-27")
        assert streak_headline(engine) == "Super Streak: 3 days"


class TestWeekView:
    def test_monday_to_sunday(self, engine):
        week = week_view(engine)
        assert [d.letter for d in week] == ["M", "T", "W", "T", "F", "S", "S"]
        assert week[0].date == "2024-02-26"
        assert week[-1].date == "2024-03-03"

    def test_before_tracking(self, engine):
        monday = week_view(engine)[0]
        assert monday.is_before_tracking is True
        assert monday.should_show is False
        assert monday.slip_up_count == 0
        assert monday.max_slip_ups == 0
        assert monday.is_in_current_streak is False

    def test_tracked_past_days(self, engine):
        week = week_view(engine)
        wednesday, thursday = week[2], week[3]
        assert (wednesday.slip_up_count, wednesday.max_slip_ups) == (5, 3)
        assert wednesday.should_show is True
        assert wednesday.is_in_current_streak is False
        assert thursday.slip_up_count == 1
        assert thursday.is_in_current_streak is True

    def test_today_and_future_hidden(self, engine):
        week = week_view(engine)
        assert [d.should_show for d in week[4:]] == [False, False, False]
        assert week[5].max_slip_ups == 3  # future days use the current allowance


class TestMonthView:
    def test_leading_padding(self, engine):
        cells = month_view(engine, 2024, 2)  # Feb 1 2024 is a Thursday
        assert cells[:3] == [None, None, None]
        assert len(cells) == 3 + 29
        assert cells[3].date == "2024-02-01"
        assert cells[-1].day == 29

    def test_reports_only_inside_tracking_window(self, engine):
        cells = [c for c in month_view(engine, 2024, 2) if c is not None]
        by_day = {c.day: c for c in cells}
        assert by_day[27].report is None
        assert by_day[28].report.slip_up_count == 5
        assert by_day[29].report.is_in_current_streak is True

    def test_month_starting_monday(self, engine):
        cells = month_view(engine, 2024, 1)  # Jan 1 2024 is a Monday
        assert cells[0] == MonthDay(date="2024-01-01", day=1, report=None)
        assert len(cells) == 31

    def test_current_month(self, engine):
        cells = [c for c in month_view(engine, 2024, 3) if c is not None]
        assert cells[0].report.date == "2024-03-01"
        assert cells[1].report is None
