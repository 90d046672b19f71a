"""
Domain models for schedules, bookings and validation results.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional, Union

import pendulum


DAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Storage convention for numeric weekdays: 0=Sunday
DAY_OF_WEEK_MAP = {
    0: "sunday",
    1: "monday",
    2: "tuesday",
    3: "wednesday",
    4: "thursday",
    5: "friday",
    6: "saturday",
}

DAY_LABELS = {
    "monday": "Monday",
    "tuesday": "Tuesday",
    "wednesday": "Wednesday",
    "thursday": "Thursday",
    "friday": "Friday",
    "saturday": "Saturday",
    "sunday": "Sunday",
}

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

DateLike = Union[date, datetime, str]


def normalize_time(value: str) -> str:
    """
    Normalize a time-of-day string to ``HH:MM``.

    Accepts ``H:MM``, ``HH:MM`` and ``HH:MM:SS`` (seconds are dropped).

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    if not isinstance(value, str):
        raise ValueError(f"Time must be a string, got {value!r}")

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    return f"{hours:02d}:{minutes:02d}"


def time_to_minutes(value: str) -> int:
    """Convert an ``HH:MM`` string to minutes since midnight."""
    hours, minutes = normalize_time(value).split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight back to ``HH:MM``."""
    if not 0 <= minutes < 24 * 60:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_time_in_range(value: str, start: str, end: str) -> bool:
    """Check ``start <= value < end`` (half-open)."""
    minutes = time_to_minutes(value)
    return time_to_minutes(start) <= minutes < time_to_minutes(end)


def to_date(value: DateLike) -> date:
    """
    Coerce a date-like value to a calendar date.

    Datetimes are reduced to their wall-clock date; no timezone
    conversion is applied.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return pendulum.from_format(value.strip(), "YYYY-MM-DD").date()
        except ValueError as exc:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc
    raise ValueError(f"Unsupported date value: {value!r}")


def day_name(value: DateLike) -> str:
    """Return the lower-case English weekday name for a date."""
    return DAY_NAMES[to_date(value).weekday()]


@dataclass(frozen=True)
class DaySchedule:
    """
    Working hours for one specific day.

    Invariants (checked when enabled): start <= end, and when both break
    bounds are set, start <= break_start < break_end <= end.
    """
    enabled: bool
    start: str = "09:00"
    end: str = "18:00"
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "start", normalize_time(self.start))
        object.__setattr__(self, "end", normalize_time(self.end))

        # A half-specified break is no break at all
        if self.break_start and self.break_end:
            object.__setattr__(self, "break_start", normalize_time(self.break_start))
            object.__setattr__(self, "break_end", normalize_time(self.break_end))
        else:
            object.__setattr__(self, "break_start", None)
            object.__setattr__(self, "break_end", None)

        if not self.enabled:
            return

        if self.start_minutes > self.end_minutes:
            raise ValueError(f"Start time {self.start} must not be after end time {self.end}")

        if self.has_break:
            break_start = time_to_minutes(self.break_start)
            break_end = time_to_minutes(self.break_end)
            if not (self.start_minutes <= break_start < break_end <= self.end_minutes):
                raise ValueError(
                    f"Break {self.break_start} - {self.break_end} must lie within "
                    f"working hours {self.start} - {self.end}"
                )

    @classmethod
    def closed(cls) -> "DaySchedule":
        """A non-working day."""
        return cls(enabled=False)

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)

    def break_window(self) -> Optional[tuple[int, int]]:
        """Return the break as (start, end) minutes, or None."""
        if not self.has_break:
            return None
        return time_to_minutes(self.break_start), time_to_minutes(self.break_end)

    def format_hours(self) -> str:
        if not self.enabled:
            return "closed"
        hours = f"{self.start} - {self.end}"
        if self.has_break:
            hours += f" (break {self.break_start} - {self.break_end})"
        return hours


WeeklySchedule = Dict[str, DaySchedule]


@dataclass(frozen=True)
class SpecialHours:
    """A schedule override for one exact calendar date."""
    special_date: str
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "special_date", to_date(self.special_date).isoformat())
        if self.is_open and not (self.open_time and self.close_time):
            raise ValueError(
                f"Special hours for {self.special_date} are open but missing open/close times"
            )


@dataclass(frozen=True)
class BookedAppointment:
    """An already-committed reservation: start time and duration in minutes."""
    time: str
    duration: int

    def __post_init__(self):
        object.__setattr__(self, "time", normalize_time(self.time))
        if self.duration <= 0:
            raise ValueError(f"Booking duration must be positive, got {self.duration}")

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration


class ValidationReason(str, Enum):
    """Why a date or time cannot be booked."""
    DATE_BLOCKED = "date_blocked"
    CLOSED_SPECIAL_DAY = "closed_special_day"
    CLOSED_REGULAR_DAY = "closed_regular_day"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    INSIDE_BREAK = "inside_break"


class ScheduleSource(str, Enum):
    """Which precedence layer decided a validation result."""
    BLOCKED = "blocked"
    SPECIAL = "special"
    STAFF = "staff"
    BUSINESS = "business"
    DEFAULT = "default"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a date (and optionally a time).

    Valid results carry the DaySchedule that applied; invalid results carry
    the most specific reason.
    """
    is_valid: bool
    source: ScheduleSource
    reason: Optional[ValidationReason] = None
    schedule: Optional[DaySchedule] = None

    @classmethod
    def ok(cls, schedule: DaySchedule, source: ScheduleSource) -> "ValidationResult":
        return cls(is_valid=True, source=source, schedule=schedule)

    @classmethod
    def fail(
        cls,
        reason: ValidationReason,
        source: ScheduleSource,
        schedule: Optional[DaySchedule] = None,
    ) -> "ValidationResult":
        return cls(is_valid=False, source=source, reason=reason, schedule=schedule)

    @property
    def message(self) -> str:
        """Caller-facing explanation of the result."""
        if self.is_valid:
            return f"Available ({self.schedule.format_hours()})"

        if self.reason is ValidationReason.DATE_BLOCKED:
            return "This date is blocked for bookings"
        if self.reason is ValidationReason.CLOSED_SPECIAL_DAY:
            return "The barbershop is closed on this date (special hours)"
        if self.reason is ValidationReason.CLOSED_REGULAR_DAY:
            if self.source is ScheduleSource.STAFF:
                return "This professional does not work on this day"
            return "The barbershop is closed on this day of the week"
        if self.reason is ValidationReason.OUTSIDE_WORKING_HOURS:
            return f"Time is outside working hours ({self.schedule.start} - {self.schedule.end})"
        return f"Time falls within the break ({self.schedule.break_start} - {self.schedule.break_end})"
