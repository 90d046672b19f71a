"""
Application services for answering availability questions.

The service fetches a schedule snapshot via a data source adapter and
delegates every decision to the domain-level ``AvailabilityResolver``.
This keeps the CLI thin and lets tests swap the data source for a stub
through a simple protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..domain.conflicts import ScheduleConflictReport, find_schedule_conflicts
from ..domain.exceptions import UnknownStaffError
from ..domain.models import (
    BookedAppointment,
    DateLike,
    SpecialHours,
    ValidationResult,
    WeeklySchedule,
    to_date,
)
from ..domain.resolver import AvailabilityResolver

logger = logging.getLogger(__name__)


@dataclass
class ShopSnapshot:
    """
    Read-only copy of everything the resolver needs.

    ``bookings`` maps ISO dates to the bookings relevant to the request.
    """
    business_hours: WeeklySchedule = field(default_factory=dict)
    special_hours: List[SpecialHours] = field(default_factory=list)
    blocked_dates: List[str] = field(default_factory=list)
    staff_schedules: Dict[str, Optional[Mapping[str, Any]]] = field(default_factory=dict)
    bookings: Dict[str, List[BookedAppointment]] = field(default_factory=dict)
    unit_id: Optional[str] = None

    def bookings_on(self, day: date) -> List[BookedAppointment]:
        return self.bookings.get(day.isoformat(), [])


class ShopDataSourceProtocol(Protocol):
    """Protocol describing the data access needed by the service."""

    async def get_snapshot(
        self,
        start_date: date,
        end_date: date,
        staff_id: Optional[str] = None,
    ) -> ShopSnapshot:
        """Return schedules and the bookings between the two dates (inclusive)."""


class AvailabilityService:
    """
    Orchestrates snapshot retrieval and availability resolution.

    A fresh snapshot is fetched for every request; the service keeps no
    state between calls. Preventing two clients from booking the same slot
    is left to the storage layer.
    """

    def __init__(self, data_source: ShopDataSourceProtocol) -> None:
        self._data_source = data_source

    async def validate(
        self,
        *,
        day: DateLike,
        time: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a date, and optionally a time, for booking."""
        calendar_day = to_date(day)
        snapshot = await self._data_source.get_snapshot(calendar_day, calendar_day, staff_id)

        result = self.build_resolver(snapshot).validate(calendar_day, time, staff_id)
        logger.info(
            "Validated %s %s (staff=%s): %s",
            calendar_day,
            time or "",
            staff_id,
            result.reason.value if result.reason else "ok",
        )
        return result

    async def find_slots(
        self,
        *,
        day: DateLike,
        service_duration_minutes: int,
        staff_id: Optional[str] = None,
    ) -> List[str]:
        """Free start times on a date for a service of the given duration."""
        calendar_day = to_date(day)
        snapshot = await self._data_source.get_snapshot(calendar_day, calendar_day, staff_id)
        resolver = self.build_resolver(snapshot)

        slots = resolver.generate_slots(calendar_day, service_duration_minutes, staff_id=staff_id)
        available = resolver.filter_available(
            slots,
            service_duration_minutes,
            snapshot.bookings_on(calendar_day),
        )

        logger.info(
            "Found %d of %d slots free on %s (staff=%s, duration=%d)",
            len(available),
            len(slots),
            calendar_day,
            staff_id,
            service_duration_minutes,
        )
        if slots and not available:
            logger.warning("Every slot on %s is already booked", calendar_day)
        return available

    async def find_available_days(
        self,
        *,
        start_date: DateLike,
        end_date: DateLike,
        service_duration_minutes: int,
        staff_id: Optional[str] = None,
    ) -> List[date]:
        """Dates in the inclusive range that have at least one free slot."""
        first = to_date(start_date)
        last = to_date(end_date)
        if last < first:
            raise ValueError(f"End date {last} must not be before start date {first}")

        snapshot = await self._data_source.get_snapshot(first, last, staff_id)
        days = self.build_resolver(snapshot).available_days(
            first,
            last,
            service_duration_minutes,
            snapshot.bookings,
            staff_id=staff_id,
        )

        logger.info(
            "Found %d available day(s) out of %d between %s and %s",
            len(days),
            (last - first).days + 1,
            first,
            last,
        )
        return days

    async def check_staff_schedule(self, *, staff_id: str) -> ScheduleConflictReport:
        """Compare a staff member's schedule with the business hours."""
        today = date.today()
        snapshot = await self._data_source.get_snapshot(today, today, staff_id)

        if staff_id not in snapshot.staff_schedules:
            raise UnknownStaffError(staff_id)

        report = find_schedule_conflicts(
            snapshot.staff_schedules[staff_id],
            snapshot.business_hours,
            snapshot.unit_id,
        )
        if report.has_conflicts:
            logger.warning(
                "Schedule of staff %s has %d conflict(s) with business hours",
                staff_id,
                len(report.conflicts),
            )
        return report

    @staticmethod
    def build_resolver(snapshot: ShopSnapshot) -> AvailabilityResolver:
        return AvailabilityResolver(
            business_hours=snapshot.business_hours,
            special_hours=snapshot.special_hours,
            blocked_dates=snapshot.blocked_dates,
            staff_schedules=snapshot.staff_schedules,
            unit_id=snapshot.unit_id,
        )


def date_range(start_date: date, days: int) -> tuple[date, date]:
    """Inclusive range of ``days`` calendar days starting at ``start_date``."""
    if days <= 0:
        raise ValueError(f"days must be greater than zero, got {days}")
    return start_date, start_date + timedelta(days=days - 1)
