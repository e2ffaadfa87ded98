"""SlipUp — console front end.

Stands in for the app screens: create a habit, count slip-ups, look at the
week strip and month calendar. One HabitStore and one StreakEngine are
built per run and handed to each command.

    python -m slipup.main create "Smoking" --allowance 3
    python -m slipup.main slip
    python -m slipup.main status
"""

import argparse
import logging
import sys
from datetime import datetime

from slipup.calendar_view import (
    BROKEN,
    SUPER,
    day_status,
    month_view,
    remaining_percent,
    streak_headline,
    week_view,
)
from slipup.config import LOG_LEVEL, STORE_KEY
from slipup.engine import StreakEngine
from slipup.record import format_day
from slipup.storage.sqlite import SqliteStorage
from slipup.store import HabitStore

log = logging.getLogger("slipup")

_STATUS_MARKS = {SUPER: "★", BROKEN: "✗"}


def _mark(slip_ups: int, allowance: int) -> str:
    return _STATUS_MARKS.get(day_status(slip_ups, allowance), "●")


def _require_habit(engine: StreakEngine) -> bool:
    if not engine.record.habit_name:
        print("No habit set. Create one with: create NAME")
        return False
    return True


# ═══════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════

def cmd_create(engine: StreakEngine, args: argparse.Namespace) -> int:
    name = args.name.strip()
    if not name:
        print("Please enter a habit name.")
        return 1
    if args.allowance is not None and args.allowance < 0:
        print("Allowance must be 0 or more.")
        return 1

    store = engine.store
    old_history = dict(store.record.slip_up_history)
    old_start = store.record.tracking_start_date
    store.clear_habit()
    if args.keep_history and old_history:
        store.restore_history(old_history, old_start)

    store.set_habit_name(name)
    store.set_description(args.description)
    if args.allowance is not None:
        store.set_daily_allowance(args.allowance)
    log.info("Habit %r created, tracking since %s", name, store.record.tracking_start_date)
    print(f"Tracking {name} (allowance {store.record.daily_allowance}/day, "
          f"since {format_day(store.record.tracking_start_date)})")
    return 0


def cmd_slip(engine: StreakEngine, _: argparse.Namespace) -> int:
    if not _require_habit(engine):
        return 1
    count = engine.record_slip_up()
    today = engine.effective_today()
    allowance = engine.allowance_on(today)
    print(f"{engine.record.habit_name}: {count}/{allowance} slip-ups today")
    if count > allowance:
        print("Over today's allowance — the streak resets tomorrow.")
    return 0


def cmd_status(engine: StreakEngine, _: argparse.Namespace) -> int:
    if not _require_habit(engine):
        return 1
    today = engine.effective_today()
    record = engine.record
    print(f"{record.habit_name} Tracker")
    if record.description:
        print(record.description)
    slip_ups = engine.slip_ups_on(today)
    allowance = engine.allowance_on(today)
    print(f"Today ({format_day(today)}): {slip_ups}/{allowance} slip-ups "
          f"({remaining_percent(slip_ups, allowance):.0f}% left)")
    print(streak_headline(engine))
    if record.development_mode:
        print(f"Development mode (day offset {record.simulated_day_offset})")
    return 0


def cmd_week(engine: StreakEngine, _: argparse.Namespace) -> int:
    for day in week_view(engine):
        if day.should_show:
            mark = _mark(day.slip_up_count, day.max_slip_ups)
            streak = " streak" if day.is_in_current_streak else ""
            print(f"{day.letter} {day.date} {mark} {day.slip_up_count}/{day.max_slip_ups}{streak}")
        else:
            print(f"{day.letter} {day.date} ·")
    return 0


def cmd_month(engine: StreakEngine, args: argparse.Namespace) -> int:
    if args.month:
        try:
            target = datetime.strptime(args.month, "%Y-%m")
        except ValueError:
            print("Month must look like YYYY-MM.")
            return 1
        year, month = target.year, target.month
    else:
        today = engine.effective_today()
        year, month = today.year, today.month

    print(f"{year:04d}-{month:02d}")
    print(" ".join(f"{letter:>3}" for letter in "MTWTFSS"))
    cells = month_view(engine, year, month)
    for start in range(0, len(cells), 7):
        row = []
        for cell in cells[start:start + 7]:
            if cell is None:
                row.append("   ")
            elif cell.report is None:
                row.append(f"{cell.day:>3}")
            else:
                mark = _mark(cell.report.slip_up_count, cell.report.max_slip_ups_for_day)
                row.append(f"{cell.day:>2}{mark}")
        print(" ".join(row))
    return 0


def cmd_report(engine: StreakEngine, args: argparse.Namespace) -> int:
    try:
        report = engine.streak_report(args.start, args.end)
    except ValueError:
        print("Dates must look like YYYY-MM-DD.")
        return 1
    if not report:
        print("Nothing to report.")
        return 0
    for day in report:
        streak = " streak" if day.is_in_current_streak else ""
        print(f"{day.date} {day.slip_up_count}/{day.max_slip_ups_for_day}{streak}")
    return 0


def cmd_allowance(engine: StreakEngine, args: argparse.Namespace) -> int:
    if args.allowance < 0:
        print("Allowance must be 0 or more.")
        return 1
    engine.store.set_daily_allowance(args.allowance)
    print(f"Daily allowance set to {args.allowance}.")
    return 0


def cmd_delete(engine: StreakEngine, args: argparse.Namespace) -> int:
    if engine.record.slip_up_history and not args.yes:
        print("This will remove all slip-up history and streak data. Re-run with --yes.")
        return 1
    engine.store.clear_habit()
    log.info("Habit deleted")
    print("Habit deleted.")
    return 0


def cmd_dev(engine: StreakEngine, args: argparse.Namespace) -> int:
    engine.store.set_development_mode(args.state == "on")
    print(f"Development mode {args.state}.")
    return 0


def cmd_advance_day(engine: StreakEngine, _: argparse.Namespace) -> int:
    if not engine.advance_simulated_day():
        print("Advancing the day needs development mode (dev on).")
        return 1
    print(f"Today is now {format_day(engine.effective_today())}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Slip-up and streak tracker")
    parser.add_argument("--db", help="SQLite file (default from SLIPUP_DB_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create (or recreate) the habit")
    create.add_argument("name", help="Habit name")
    create.add_argument("--description", default="", help="Optional habit details")
    create.add_argument("--allowance", type=int, help="Slip-ups allowed per day")
    create.add_argument("--keep-history", action="store_true",
                        help="Keep slip-up history from the previous habit")
    create.set_defaults(func=cmd_create)

    sub.add_parser("slip", help="Count one slip-up today").set_defaults(func=cmd_slip)
    sub.add_parser("status", help="Show today and the streak").set_defaults(func=cmd_status)
    sub.add_parser("week", help="Show this week").set_defaults(func=cmd_week)

    month = sub.add_parser("month", help="Show a month calendar")
    month.add_argument("--month", help="Month to show (YYYY-MM)")
    month.set_defaults(func=cmd_month)

    report = sub.add_parser("report", help="Day-by-day report")
    report.add_argument("--start", help="First date (YYYY-MM-DD), default tracking start")
    report.add_argument("--end", help="Last date (YYYY-MM-DD), default today")
    report.set_defaults(func=cmd_report)

    allowance = sub.add_parser("allowance", help="Set the daily allowance")
    allowance.add_argument("allowance", type=int, help="Slip-ups allowed per day")
    allowance.set_defaults(func=cmd_allowance)

    delete = sub.add_parser("delete", help="Delete the habit and its history")
    delete.add_argument("--yes", action="store_true", help="Confirm deleting history")
    delete.set_defaults(func=cmd_delete)

    dev = sub.add_parser("dev", help="Toggle development mode")
    dev.add_argument("state", choices=["on", "off"])
    dev.set_defaults(func=cmd_dev)

    sub.add_parser("advance-day", help="Simulate the next day (development mode)") \
        .set_defaults(func=cmd_advance_day)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-5s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    args = build_parser().parse_args(argv)

    store = HabitStore(SqliteStorage(args.db), key=STORE_KEY)
    store.load()
    engine = StreakEngine(store)
    return args.func(engine, args)


if __name__ == "__main__":
    sys.exit(main())
