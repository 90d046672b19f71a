"""
Normalization of stored schedule shapes into ``DaySchedule`` values.

Business hours, staff schedules and special-date overrides are stored in
slightly different shapes. Everything is converted here so the resolver
only ever sees ``DaySchedule``.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from .models import (
    DAY_NAMES,
    DAY_OF_WEEK_MAP,
    DaySchedule,
    SpecialHours,
    WeeklySchedule,
)

DEFAULT_START = "09:00"
DEFAULT_END = "18:00"


def _first_present(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def normalize_day_name(value: Union[str, int]) -> str:
    """
    Normalize a weekday given as a name or a number (0=Sunday).

    Raises:
        ValueError: If the weekday is not recognized
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid day of week: {value!r}")

    if isinstance(value, int):
        if value not in DAY_OF_WEEK_MAP:
            raise ValueError(f"Day of week must be between 0 and 6, got {value}")
        return DAY_OF_WEEK_MAP[value]

    name = str(value).strip().lower()
    if name.isdigit():
        return normalize_day_name(int(name))
    if name not in DAY_NAMES:
        raise ValueError(f"Unknown day of week: {value!r}")
    return name


def normalize_day_schedule(raw: Optional[Mapping[str, Any]]) -> DaySchedule:
    """
    Convert one stored day entry to a ``DaySchedule``.

    Accepts the legacy key aliases ``enabled``/``is_open``/``is_working``,
    ``start``/``open_time`` and ``end``/``close_time``. A missing entry is a
    day off.
    """
    if raw is None:
        return DaySchedule.closed()

    if isinstance(raw, DaySchedule):
        return raw

    if not isinstance(raw, Mapping):
        raise ValueError(f"Day schedule must be a mapping, got {raw!r}")

    return DaySchedule(
        enabled=bool(_first_present(raw, "enabled", "is_open", "is_working", default=False)),
        start=_first_present(raw, "start", "open_time", default=DEFAULT_START),
        end=_first_present(raw, "end", "close_time", default=DEFAULT_END),
        break_start=raw.get("break_start"),
        break_end=raw.get("break_end"),
    )


def business_hours_to_schedule(rows: Iterable[Mapping[str, Any]]) -> WeeklySchedule:
    """
    Build the tenant-wide weekly schedule from business-hours rows.

    Each row carries ``day_of_week``, ``is_open``, ``open_time``,
    ``close_time`` and optional break bounds. Later rows for the same day
    replace earlier ones.
    """
    weekly: WeeklySchedule = {}
    for row in rows:
        day = normalize_day_name(row["day_of_week"])
        weekly[day] = DaySchedule(
            enabled=bool(row.get("is_open", False)),
            start=row.get("open_time") or DEFAULT_START,
            end=row.get("close_time") or DEFAULT_END,
            break_start=row.get("break_start"),
            break_end=row.get("break_end"),
        )
    return weekly


def special_hours_to_schedule(special: SpecialHours) -> DaySchedule:
    """Build the DaySchedule of an override. Closed overrides map to a day off."""
    if not special.is_open:
        return DaySchedule.closed()

    return DaySchedule(
        enabled=True,
        start=special.open_time,
        end=special.close_time,
        break_start=special.break_start,
        break_end=special.break_end,
    )


def is_multi_unit_schedule(schedule: Any) -> bool:
    """Multi-unit schedules are keyed by unit id under ``units``."""
    return isinstance(schedule, Mapping) and "units" in schedule


def staff_schedule_for_day(
    schedule: Optional[Mapping[str, Any]],
    day: str,
    unit_id: Optional[str] = None,
) -> Optional[DaySchedule]:
    """
    Resolve one weekday from a staff schedule.

    Returns None when the staff member has no entry for that day, which
    means "defer to business hours". A multi-unit schedule only answers for
    a known ``unit_id``.
    """
    if not schedule:
        return None

    if is_multi_unit_schedule(schedule):
        units = schedule.get("units") or {}
        if not isinstance(units, Mapping):
            raise ValueError(f"Staff schedule units must be a mapping, got {units!r}")
        if not unit_id or unit_id not in units:
            return None
        weekly = units[unit_id] or {}
        if not isinstance(weekly, Mapping):
            raise ValueError(f"Schedule for unit '{unit_id}' must be a mapping, got {weekly!r}")
    else:
        weekly = schedule

    entry = weekly.get(day)
    if entry is None:
        return None
    return normalize_day_schedule(entry)


def weekly_staff_schedule(
    schedule: Optional[Mapping[str, Any]],
    unit_id: Optional[str] = None,
) -> WeeklySchedule:
    """Resolve every weekday the staff member has an entry for."""
    weekly: WeeklySchedule = {}
    for day in DAY_NAMES:
        day_schedule = staff_schedule_for_day(schedule, day, unit_id)
        if day_schedule is not None:
            weekly[day] = day_schedule
    return weekly
