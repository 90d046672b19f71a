"""
File-backed shop data source.

Stands in for the managed backend: the schedule snapshot is read from the
same YAML file as the settings.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from ..config import ShopConfig
from ..domain.exceptions import UnknownStaffError
from ..domain.models import BookedAppointment
from ..services.availability import ShopSnapshot

logger = logging.getLogger(__name__)


class YamlShopDataSource:
    """
    Data source serving snapshots from a loaded ``ShopConfig``.

    Missing sections in the file are simply empty. Cancelled appointments
    never block a slot.
    """

    def __init__(self, config: ShopConfig):
        self.config = config

    async def get_snapshot(
        self,
        start_date: date,
        end_date: date,
        staff_id: Optional[str] = None,
    ) -> ShopSnapshot:
        """
        Build a snapshot for the given dates.

        Args:
            start_date: First date whose bookings are needed
            end_date: Last date whose bookings are needed (inclusive)
            staff_id: Restrict bookings to this staff member; all bookings otherwise

        Returns:
            ShopSnapshot with schedules and bookings grouped by ISO date

        Raises:
            UnknownStaffError: If ``staff_id`` is not an active staff member
        """
        if staff_id is not None and self.config.find_staff(staff_id) is None:
            raise UnknownStaffError(staff_id)

        snapshot = ShopSnapshot(
            business_hours=self.config.weekly_business_hours(),
            special_hours=[entry.to_domain() for entry in self.config.special_hours],
            blocked_dates=[d.isoformat() for d in self.config.blocked_dates],
            staff_schedules=self.config.staff_schedules(),
            bookings=self._collect_bookings(start_date, end_date, staff_id),
            unit_id=self.config.unit_id,
        )

        logger.debug(
            "Loaded snapshot for %s..%s: %d special date(s), %d blocked date(s), %d booking day(s)",
            start_date,
            end_date,
            len(snapshot.special_hours),
            len(snapshot.blocked_dates),
            len(snapshot.bookings),
        )
        return snapshot

    def _collect_bookings(
        self,
        start_date: date,
        end_date: date,
        staff_id: Optional[str],
    ) -> Dict[str, List[BookedAppointment]]:
        bookings: Dict[str, List[BookedAppointment]] = {}

        for appointment in self.config.appointments:
            if appointment.is_cancelled:
                continue
            if not start_date <= appointment.appointment_date <= end_date:
                continue
            if staff_id is not None and appointment.staff_id != staff_id:
                continue

            key = appointment.appointment_date.isoformat()
            bookings.setdefault(key, []).append(appointment.to_domain())

        return bookings
