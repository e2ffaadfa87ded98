"""Streak engine — the query and slip-up surface the screens talk to.

Wraps one HabitStore. Point queries delegate to slipup.streaks with the
store's effective today. The backward scans (streak, super-streak, last
break) are memoised per (store revision, effective today), so repeated
renders between mutations don't rescan history.
"""

import logging
from datetime import date

from slipup.store import HabitStore
from slipup.streaks import (
    DayReport,
    allowance_on,
    compute_streak,
    compute_super_streak,
    is_before_today,
    is_in_current_streak,
    last_streak_break,
    slip_ups_on,
    streak_report,
)

log = logging.getLogger(__name__)


class StreakEngine:

    def __init__(self, store: HabitStore) -> None:
        self.store = store
        self._memo_key: tuple[int, date] | None = None
        self._memo: dict[str, object] = {}

    @property
    def record(self):
        return self.store.record

    def effective_today(self) -> date:
        return self.store.effective_today()

    def _memoised(self, name: str, compute):
        today = self.effective_today()
        key = (self.store.revision, today)
        if key != self._memo_key:
            self._memo_key = key
            self._memo = {}
        if name not in self._memo:
            self._memo[name] = compute(self.record, today)
        return self._memo[name]

    # ═══════════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════════

    def slip_ups_on(self, day) -> int:
        return slip_ups_on(self.record, day)

    def allowance_on(self, day) -> int:
        return allowance_on(self.record, day)

    def is_before_today(self, day) -> bool:
        return is_before_today(self.record, day, self.effective_today())

    def last_streak_break_date(self) -> date:
        return self._memoised("last_break", last_streak_break)

    def is_in_current_streak(self, day) -> bool:
        if not self.is_before_today(day):
            return False
        return is_in_current_streak(
            self.record, day, self.effective_today(), self.last_streak_break_date()
        )

    @property
    def streak(self) -> int:
        return self._memoised("streak", compute_streak)

    @property
    def super_streak(self) -> int:
        return self._memoised("super_streak", compute_super_streak)

    def streak_report(self, start=None, end=None) -> list[DayReport]:
        """Day-by-day report; defaults to tracking start through effective today."""
        today = self.effective_today()
        if start is None:
            start = self.record.tracking_start_date
        if end is None:
            end = today
        return streak_report(self.record, start, end, today)

    # ═══════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════

    def record_slip_up(self) -> int:
        """Log one slip-up for effective today. Returns today's new count."""
        today = self.effective_today()
        entry = self.store.add_slip_up(today)
        log.info("Slip-up recorded for %s (%d/%s)", today, entry.count, entry.max_allowed)
        return entry.count

    def advance_simulated_day(self) -> bool:
        """Move the simulated clock one day forward. Development mode only."""
        if not self.record.development_mode:
            log.warning("Refusing to advance simulated day outside development mode")
            return False
        self.store.set_simulated_day_offset(self.record.simulated_day_offset + 1)
        log.info(
            "Simulated day advanced to %s (offset %d)",
            self.effective_today(), self.record.simulated_day_offset,
        )
        return True
