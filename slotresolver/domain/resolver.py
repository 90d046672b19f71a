"""
Core business logic for resolving availability and bookable slots.

Pure domain logic: no I/O, no shared mutable state. Callers supply a
snapshot of the shop's schedules and bookings; the resolver only reads it.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import (
    BookedAppointment,
    DateLike,
    DaySchedule,
    ScheduleSource,
    SpecialHours,
    ValidationReason,
    ValidationResult,
    WeeklySchedule,
    day_name,
    is_time_in_range,
    minutes_to_time,
    normalize_time,
    time_to_minutes,
    to_date,
)
from .schedules import special_hours_to_schedule, staff_schedule_for_day

logger = logging.getLogger(__name__)

SLOT_STEP_MINUTES = 30
DEFAULT_SERVICE_MINUTES = 30


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a precedence rule may look at for one validation."""
    day: date
    day_name: str
    staff_id: Optional[str] = None

    @property
    def iso_date(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class Resolution:
    """
    A rule's definitive answer.

    Carries either a failure reason or the DaySchedule that applies.
    """
    source: ScheduleSource
    schedule: Optional[DaySchedule] = None
    reason: Optional[ValidationReason] = None


class BlockedDateRule:
    """Blocked dates win over every other configuration."""

    def __init__(self, blocked_dates: Iterable[DateLike]):
        self.blocked_dates = frozenset(to_date(d).isoformat() for d in blocked_dates)

    def resolve(self, context: ResolutionContext) -> Optional[Resolution]:
        if context.iso_date in self.blocked_dates:
            return Resolution(source=ScheduleSource.BLOCKED, reason=ValidationReason.DATE_BLOCKED)
        return None


class SpecialHoursRule:
    """Date-specific overrides supersede weekly schedules, including to close."""

    def __init__(self, special_hours: Iterable[SpecialHours]):
        self.special_hours: Dict[str, SpecialHours] = {
            special.special_date: special for special in special_hours
        }

    def resolve(self, context: ResolutionContext) -> Optional[Resolution]:
        special = self.special_hours.get(context.iso_date)
        if special is None:
            return None

        if not special.is_open:
            return Resolution(
                source=ScheduleSource.SPECIAL,
                reason=ValidationReason.CLOSED_SPECIAL_DAY,
            )

        return Resolution(
            source=ScheduleSource.SPECIAL,
            schedule=special_hours_to_schedule(special),
        )


class StaffScheduleRule:
    """A staff member's own weekly schedule, optionally scoped to one unit."""

    def __init__(
        self,
        staff_schedules: Mapping[str, Optional[Mapping]],
        unit_id: Optional[str] = None,
    ):
        self.staff_schedules = staff_schedules
        self.unit_id = unit_id

    def resolve(self, context: ResolutionContext) -> Optional[Resolution]:
        if not context.staff_id:
            return None

        schedule = staff_schedule_for_day(
            self.staff_schedules.get(context.staff_id),
            context.day_name,
            self.unit_id,
        )
        if schedule is None:
            return None
        return Resolution(source=ScheduleSource.STAFF, schedule=schedule)


class BusinessHoursRule:
    """The tenant-wide weekly schedule."""

    def __init__(self, business_hours: WeeklySchedule):
        self.business_hours = business_hours

    def resolve(self, context: ResolutionContext) -> Optional[Resolution]:
        schedule = self.business_hours.get(context.day_name)
        if schedule is None:
            return None
        return Resolution(source=ScheduleSource.BUSINESS, schedule=schedule)


class DefaultClosedRule:
    """Days with no configuration at all are closed."""

    def resolve(self, context: ResolutionContext) -> Optional[Resolution]:
        return Resolution(source=ScheduleSource.DEFAULT, schedule=DaySchedule.closed())


class AvailabilityResolver:
    """
    Decides whether a date/time can be booked and which slots are free.

    Precedence (first definitive rule wins):
    1. Blocked dates
    2. Special-date overrides
    3. Staff personal schedule
    4. Business hours
    5. Closed by default
    """

    def __init__(
        self,
        business_hours: Optional[WeeklySchedule] = None,
        special_hours: Iterable[SpecialHours] = (),
        blocked_dates: Iterable[DateLike] = (),
        staff_schedules: Optional[Mapping[str, Optional[Mapping]]] = None,
        unit_id: Optional[str] = None,
    ):
        self.unit_id = unit_id
        self.rules = [
            BlockedDateRule(blocked_dates),
            SpecialHoursRule(special_hours),
            StaffScheduleRule(staff_schedules or {}, unit_id),
            BusinessHoursRule(business_hours or {}),
            DefaultClosedRule(),
        ]

    def resolve_day(self, day: DateLike, staff_id: Optional[str] = None) -> Resolution:
        """Run the precedence rules for a date and return the first definitive answer."""
        calendar_day = to_date(day)
        context = ResolutionContext(
            day=calendar_day,
            day_name=day_name(calendar_day),
            staff_id=staff_id,
        )

        for rule in self.rules:
            resolution = rule.resolve(context)
            if resolution is not None:
                logger.debug(
                    "%s resolved %s (%s, staff=%s)",
                    type(rule).__name__,
                    context.iso_date,
                    context.day_name,
                    staff_id,
                )
                return resolution

        # DefaultClosedRule always answers
        raise AssertionError("precedence rules did not produce a resolution")

    def validate(
        self,
        day: DateLike,
        time: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Check whether a date, and optionally a time on it, can be booked.

        Args:
            day: Calendar date to check
            time: Optional HH:MM start time; when omitted only the day is checked
            staff_id: Staff member whose personal schedule applies, if any

        Returns:
            ValidationResult with the applicable DaySchedule, or the most
            specific reason the booking is not possible
        """
        resolution = self.resolve_day(day, staff_id)

        if resolution.reason is not None:
            return ValidationResult.fail(resolution.reason, resolution.source)

        schedule = resolution.schedule
        if not schedule.enabled:
            return ValidationResult.fail(
                ValidationReason.CLOSED_REGULAR_DAY,
                resolution.source,
                schedule,
            )

        if time is not None:
            reason = self._check_time_window(normalize_time(time), schedule)
            if reason is not None:
                return ValidationResult.fail(reason, resolution.source, schedule)

        return ValidationResult.ok(schedule, resolution.source)

    def generate_slots(
        self,
        day: DateLike,
        service_duration_minutes: int = DEFAULT_SERVICE_MINUTES,
        staff_id: Optional[str] = None,
    ) -> List[str]:
        """
        Generate every start time on the slot grid where the service fits.

        Existing bookings are not considered here; see ``filter_available``.
        """
        self._check_duration(service_duration_minutes)

        validation = self.validate(day, staff_id=staff_id)
        if not validation.is_valid:
            return []

        schedule = validation.schedule
        break_window = schedule.break_window()
        slots: List[str] = []

        current = schedule.start_minutes
        while current + service_duration_minutes <= schedule.end_minutes:
            slot_end = current + service_duration_minutes
            overlaps_break = break_window is not None and self._intervals_overlap(
                current, slot_end, break_window[0], break_window[1]
            )
            if not overlaps_break:
                slots.append(minutes_to_time(current))
            current += SLOT_STEP_MINUTES

        return slots

    def filter_available(
        self,
        slots: Sequence[str],
        service_duration_minutes: int,
        booked: Iterable[BookedAppointment],
    ) -> List[str]:
        """Drop every slot whose service interval intersects a booking."""
        self._check_duration(service_duration_minutes)
        bookings = list(booked)

        return [
            slot for slot in slots
            if not self.has_overlap(slot, service_duration_minutes, bookings)
        ]

    def available_slots(
        self,
        day: DateLike,
        service_duration_minutes: int,
        booked: Iterable[BookedAppointment] = (),
        staff_id: Optional[str] = None,
    ) -> List[str]:
        """Generate slots for a date and remove those taken by bookings."""
        slots = self.generate_slots(day, service_duration_minutes, staff_id=staff_id)
        return self.filter_available(slots, service_duration_minutes, booked)

    def available_days(
        self,
        start_date: DateLike,
        end_date: DateLike,
        service_duration_minutes: int,
        bookings_by_date: Optional[Mapping[str, Sequence[BookedAppointment]]] = None,
        staff_id: Optional[str] = None,
    ) -> List[date]:
        """
        List the dates in an inclusive range with at least one free slot.

        ``bookings_by_date`` maps ISO dates to that day's bookings.
        """
        first = to_date(start_date)
        last = to_date(end_date)
        if last < first:
            raise ValueError(f"End date {last} must not be before start date {first}")

        bookings_by_date = bookings_by_date or {}
        days: List[date] = []

        current = first
        while current <= last:
            booked = bookings_by_date.get(current.isoformat(), ())
            if self.available_slots(current, service_duration_minutes, booked, staff_id):
                days.append(current)
            current += timedelta(days=1)

        return days

    @classmethod
    def has_overlap(
        cls,
        start_time: str,
        duration_minutes: int,
        booked: Iterable[BookedAppointment],
    ) -> bool:
        """Check whether ``[start, start + duration)`` intersects any booking."""
        slot_start = time_to_minutes(start_time)
        slot_end = slot_start + duration_minutes

        return any(
            cls._intervals_overlap(slot_start, slot_end, b.start_minutes, b.end_minutes)
            for b in booked
        )

    @staticmethod
    def _intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
        """Half-open interval intersection; touching endpoints do not overlap."""
        return start_a < end_b and end_a > start_b

    @staticmethod
    def _check_time_window(time: str, schedule: DaySchedule) -> Optional[ValidationReason]:
        if not is_time_in_range(time, schedule.start, schedule.end):
            return ValidationReason.OUTSIDE_WORKING_HOURS

        if schedule.has_break and is_time_in_range(time, schedule.break_start, schedule.break_end):
            return ValidationReason.INSIDE_BREAK

        return None

    @staticmethod
    def _check_duration(duration_minutes: int) -> None:
        if duration_minutes <= 0:
            raise ValueError(f"Service duration must be positive, got {duration_minutes}")
