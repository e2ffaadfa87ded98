"""Habit record — the persisted state of the single tracked habit.

Pure data plus snapshot conversion. No derivation logic lives here; see
slipup.streaks for that.

Snapshot layout (one flat JSON object, camelCase keys):
    {
      "habitName": "Smoking",
      "description": "",
      "maxSlipUps": 3,
      "slipUpHistory": {"2024-01-10": {"count": 2, "maxAllowed": 3}},
      "startDate": "2024-01-10",
      "trackingStartDate": "2024-01-10",
      "daysOffset": 0,
      "developmentMode": false
    }

Older snapshots store history values as {"count": n} without maxAllowed;
those days are judged against the current allowance.
"""

from dataclasses import dataclass, field
from datetime import date, datetime

SNAPSHOT_FIELDS = (
    "habitName",
    "description",
    "maxSlipUps",
    "slipUpHistory",
    "startDate",
    "trackingStartDate",
    "daysOffset",
    "developmentMode",
)


class SnapshotError(ValueError):
    """A persisted snapshot failed structural validation."""


def parse_day(value) -> date:
    """Coerce a date, datetime or ISO yyyy-MM-dd string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value, "%Y-%m-%d").date()
    raise TypeError(f"Not a calendar date: {value!r}")


def format_day(value) -> str:
    return parse_day(value).isoformat()


@dataclass
class DayEntry:
    """Slip-ups recorded for one calendar day."""
    count: int = 0
    max_allowed: int | None = None  # None = legacy {count} entry

    def to_dict(self) -> dict:
        data = {"count": self.count}
        if self.max_allowed is not None:
            data["maxAllowed"] = self.max_allowed
        return data


@dataclass
class HabitRecord:
    """Canonical habit state. One per installation."""
    tracking_start_date: date
    start_date: date
    habit_name: str = ""
    description: str = ""
    daily_allowance: int = 0
    slip_up_history: dict[str, DayEntry] = field(default_factory=dict)
    simulated_day_offset: int = 0
    development_mode: bool = False

    @property
    def is_active(self) -> bool:
        return bool(self.habit_name)


def default_record(today: date, development_mode: bool = False) -> HabitRecord:
    return HabitRecord(
        tracking_start_date=today,
        start_date=today,
        development_mode=development_mode,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Snapshot conversion
# ═══════════════════════════════════════════════════════════════════════════

def to_snapshot(record: HabitRecord) -> dict:
    return {
        "habitName": record.habit_name,
        "description": record.description,
        "maxSlipUps": record.daily_allowance,
        "slipUpHistory": {
            day: entry.to_dict() for day, entry in record.slip_up_history.items()
        },
        "startDate": record.start_date.isoformat(),
        "trackingStartDate": record.tracking_start_date.isoformat(),
        "daysOffset": record.simulated_day_offset,
        "developmentMode": record.development_mode,
    }


def _is_int(value) -> bool:
    # bool is an int subclass; a JSON true is not a count
    return isinstance(value, int) and not isinstance(value, bool)


def _require(data: dict, key: str, check, expected: str):
    value = data[key]
    if not check(value):
        raise SnapshotError(f"{key} must be {expected}, got {type(value).__name__}")
    return value


def _require_day(data: dict, key: str) -> date:
    value = _require(data, key, lambda v: isinstance(v, str), "an ISO date string")
    try:
        return parse_day(value)
    except ValueError:
        raise SnapshotError(f"{key} is not a yyyy-MM-dd date: {value!r}") from None


def _parse_entry(day: str, value) -> DayEntry:
    if not isinstance(value, dict) or not _is_int(value.get("count")):
        raise SnapshotError(f"slipUpHistory[{day}] must have an integer count")
    extra = set(value) - {"count", "maxAllowed"}
    if extra:
        raise SnapshotError(f"slipUpHistory[{day}] has unexpected keys: {sorted(extra)}")
    if "maxAllowed" in value and not _is_int(value["maxAllowed"]):
        raise SnapshotError(f"slipUpHistory[{day}].maxAllowed must be an integer")
    return DayEntry(count=value["count"], max_allowed=value.get("maxAllowed"))


def from_snapshot(data) -> HabitRecord:
    """Validate a snapshot and build a record from it.

    All fields are required. Any missing or mistyped field rejects the
    whole snapshot with SnapshotError; nothing is partially recovered.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"snapshot must be an object, got {type(data).__name__}")
    missing = [key for key in SNAPSHOT_FIELDS if key not in data]
    if missing:
        raise SnapshotError(f"snapshot is missing fields: {missing}")

    history_raw = _require(data, "slipUpHistory", lambda v: isinstance(v, dict), "an object")
    history: dict[str, DayEntry] = {}
    for day, value in history_raw.items():
        try:
            key = format_day(day)
        except (TypeError, ValueError):
            raise SnapshotError(f"slipUpHistory key is not a yyyy-MM-dd date: {day!r}") from None
        if key != day:
            raise SnapshotError(f"slipUpHistory key is not canonical: {day!r}")
        history[key] = _parse_entry(day, value)

    return HabitRecord(
        habit_name=_require(data, "habitName", lambda v: isinstance(v, str), "a string"),
        description=_require(data, "description", lambda v: isinstance(v, str), "a string"),
        daily_allowance=_require(data, "maxSlipUps", _is_int, "an integer"),
        slip_up_history=history,
        start_date=_require_day(data, "startDate"),
        tracking_start_date=_require_day(data, "trackingStartDate"),
        simulated_day_offset=_require(data, "daysOffset", _is_int, "an integer"),
        development_mode=_require(
            data, "developmentMode", lambda v: isinstance(v, bool), "a boolean"
        ),
    )
