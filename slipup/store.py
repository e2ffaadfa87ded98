"""Habit store — owns the habit record and mediates all storage I/O.

Construct one HabitStore at application start and pass it to whatever needs
it. Every mutation updates memory synchronously, bumps `revision`, schedules
a save and notifies subscribers.

Persistence is fire-and-forget:
  - Inside a running asyncio loop, writes run in a worker thread behind a
    depth-1 queue. Snapshots submitted while a write is in flight replace
    each other, so only the latest state is written next.
  - With no running loop (scripts, CLI) the write happens inline.
  - A failed write is logged. The in-memory record stays authoritative and
    unsaved changes are lost on restart.
"""

import asyncio
import logging
from datetime import date, datetime, timezone, timedelta
from typing import Callable

from slipup.config import DEVELOPMENT_MODE, STORE_KEY, TIMEZONE_OFFSET_HOURS
from slipup.record import (
    DayEntry,
    SnapshotError,
    default_record,
    format_day,
    from_snapshot,
    parse_day,
    to_snapshot,
)
from slipup.storage import Storage
from slipup.streaks import effective_today

log = logging.getLogger(__name__)

TZ = timezone(timedelta(hours=TIMEZONE_OFFSET_HOURS))


def _real_today() -> date:
    return datetime.now(TZ).date()


class SnapshotWriter:
    """Serialises snapshot writes for one key, latest state wins."""

    def __init__(self, storage: Storage, key: str) -> None:
        self._storage = storage
        self._key = key
        self._pending: dict | None = None
        self._task: asyncio.Task | None = None

    def submit(self, snapshot: dict) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(snapshot)
            return

        self._pending = snapshot
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            snapshot, self._pending = self._pending, None
            await asyncio.to_thread(self._write, snapshot)

    def _write(self, snapshot: dict) -> bool:
        try:
            self._storage.save(self._key, snapshot)
            return True
        except Exception as e:
            log.error("Failed to save habit snapshot %s: %s", self._key, e, exc_info=True)
            return False

    async def flush(self) -> None:
        """Wait until every submitted snapshot has been written (or failed)."""
        while self._task is not None and not self._task.done():
            await self._task


class HabitStore:
    """The single habit record of this installation."""

    def __init__(
        self,
        storage: Storage,
        key: str = STORE_KEY,
        clock: Callable[[], date] = _real_today,
        development_mode: bool = DEVELOPMENT_MODE,
    ) -> None:
        self.storage = storage
        self.key = key
        self.clock = clock
        self.record = default_record(clock(), development_mode)
        self.revision = 0
        self._writer = SnapshotWriter(storage, key)
        self._subscribers: list[Callable[["HabitStore"], None]] = []

    def effective_today(self) -> date:
        return effective_today(self.record, self.clock())

    # ═══════════════════════════════════════════════════════════════════════
    # Persistence
    # ═══════════════════════════════════════════════════════════════════════

    def load(self) -> bool:
        """Replace the in-memory record with the stored snapshot.

        Returns True if a valid snapshot was loaded. Missing or invalid
        snapshots leave the defaults in place. Never raises.
        """
        try:
            data = self.storage.load(self.key)
        except Exception as e:
            log.error("Failed to read habit snapshot %s: %s", self.key, e, exc_info=True)
            return False

        if data is None:
            log.info("No habit snapshot under %s — starting fresh", self.key)
            return False

        try:
            record = from_snapshot(data)
        except SnapshotError as e:
            log.warning("Discarding invalid habit snapshot %s: %s", self.key, e)
            return False

        self.record = record
        self._changed()
        log.info(
            "Loaded habit %r (%d recorded days, tracking since %s)",
            record.habit_name, len(record.slip_up_history), record.tracking_start_date,
        )
        return True

    def save(self) -> None:
        self._writer.submit(to_snapshot(self.record))

    async def flush(self) -> None:
        await self._writer.flush()

    # ═══════════════════════════════════════════════════════════════════════
    # Change notification
    # ═══════════════════════════════════════════════════════════════════════

    def subscribe(self, callback: Callable[["HabitStore"], None]) -> Callable[[], None]:
        """Call `callback(store)` after every mutation. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _changed(self) -> None:
        self.revision += 1
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                log.error("Habit store subscriber %r failed: %s", callback, e, exc_info=True)

    def _commit(self) -> None:
        self.save()
        self._changed()

    # ═══════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════

    def set_habit_name(self, name: str) -> None:
        """Name the habit. Naming an empty record starts a new habit today.

        A fresh habit with no history also restarts the tracking window, so
        idle days before creation never count toward a streak. Restored
        history keeps its own tracking start.
        """
        if name and not self.record.habit_name:
            today = self.effective_today()
            self.record.start_date = today
            if not self.record.slip_up_history:
                self.record.tracking_start_date = today
        self.record.habit_name = name
        self._commit()

    def set_description(self, text: str) -> None:
        self.record.description = text
        self._commit()

    def set_daily_allowance(self, allowance: int) -> None:
        self.record.daily_allowance = allowance
        self._commit()

    def set_tracking_start_date(self, day) -> None:
        self.record.tracking_start_date = parse_day(day)
        self._commit()

    def set_development_mode(self, enabled: bool) -> None:
        self.record.development_mode = enabled
        self._commit()

    def set_simulated_day_offset(self, offset: int) -> None:
        self.record.simulated_day_offset = offset
        self._commit()

    def add_slip_up(self, day) -> DayEntry:
        """Add one slip-up to `day`, freezing the current allowance on first log."""
        key = format_day(day)
        entry = self.record.slip_up_history.get(key)
        if entry is None:
            entry = DayEntry(count=0, max_allowed=self.record.daily_allowance)
            self.record.slip_up_history[key] = entry
        entry.count += 1
        self._commit()
        return entry

    def restore_history(self, history: dict, tracking_start_date) -> None:
        """Bulk-replace history and tracking start (recreating a habit, keeping its past)."""
        restored: dict[str, DayEntry] = {}
        for day, entry in history.items():
            if isinstance(entry, dict):
                entry = DayEntry(count=entry["count"], max_allowed=entry.get("maxAllowed"))
            else:
                entry = DayEntry(count=entry.count, max_allowed=entry.max_allowed)
            restored[format_day(day)] = entry
        self.record.slip_up_history = restored
        self.record.tracking_start_date = parse_day(tracking_start_date)
        self._commit()
        log.info(
            "Restored %d days of history, tracking since %s",
            len(restored), self.record.tracking_start_date,
        )

    def clear_habit(self) -> None:
        """Reset to defaults; the tracking window restarts at effective today.

        The simulated clock (offset and development flag) survives so the
        new tracking start never lies after effective today.
        """
        today = self.effective_today()
        offset = self.record.simulated_day_offset
        development_mode = self.record.development_mode
        self.record = default_record(today, development_mode)
        self.record.simulated_day_offset = offset
        self._commit()
        log.info("Habit cleared, tracking restarts %s", today)
