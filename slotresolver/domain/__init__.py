"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflicts import ScheduleConflict, ScheduleConflictReport, find_schedule_conflicts
from .models import (
    BookedAppointment,
    DaySchedule,
    ScheduleSource,
    SpecialHours,
    ValidationReason,
    ValidationResult,
)
from .resolver import AvailabilityResolver

__all__ = [
    "AvailabilityResolver",
    "BookedAppointment",
    "DaySchedule",
    "ScheduleConflict",
    "ScheduleConflictReport",
    "ScheduleSource",
    "SpecialHours",
    "ValidationReason",
    "ValidationResult",
    "find_schedule_conflicts",
]
