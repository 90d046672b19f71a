"""
Validation of a staff member's weekly schedule against business hours.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from .models import DAY_LABELS, DAY_NAMES, WeeklySchedule
from .schedules import staff_schedule_for_day


class ConflictType(str, Enum):
    CLOSED_DAY = "closed_day"
    OUTSIDE_HOURS = "outside_hours"


class ConflictSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ScheduleConflict:
    day: str
    conflict_type: ConflictType
    message: str
    severity: ConflictSeverity = ConflictSeverity.ERROR


@dataclass
class ScheduleConflictReport:
    """All conflicts found for one staff schedule."""
    conflicts: List[ScheduleConflict] = field(default_factory=list)

    def for_day(self, day: str) -> List[ScheduleConflict]:
        return [c for c in self.conflicts if c.day == day]

    def day_has_conflict(self, day: str) -> bool:
        return any(c.day == day for c in self.conflicts)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def error_count(self) -> int:
        return sum(1 for c in self.conflicts if c.severity is ConflictSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for c in self.conflicts if c.severity is ConflictSeverity.WARNING)

    @property
    def can_save(self) -> bool:
        """A schedule with errors must not be saved."""
        return self.error_count == 0


def find_schedule_conflicts(
    staff_schedule: Optional[Mapping[str, Any]],
    business_hours: WeeklySchedule,
    unit_id: Optional[str] = None,
) -> ScheduleConflictReport:
    """
    Compare a staff schedule with the shop's business hours.

    Only days the staff member works are checked. Working on a day the
    shop is closed, starting before opening and leaving after closing are
    all errors.
    """
    report = ScheduleConflictReport()

    for day in DAY_NAMES:
        staff_day = staff_schedule_for_day(staff_schedule, day, unit_id)
        if staff_day is None or not staff_day.enabled:
            continue

        label = DAY_LABELS[day]
        business_day = business_hours.get(day)

        if business_day is None or not business_day.enabled:
            report.conflicts.append(ScheduleConflict(
                day=day,
                conflict_type=ConflictType.CLOSED_DAY,
                message=f"The barbershop is closed on {label}",
            ))
            continue

        if staff_day.start_minutes < business_day.start_minutes:
            report.conflicts.append(ScheduleConflict(
                day=day,
                conflict_type=ConflictType.OUTSIDE_HOURS,
                message=(
                    f"{label}: start ({staff_day.start}) is before the "
                    f"barbershop opens ({business_day.start})"
                ),
            ))

        if staff_day.end_minutes > business_day.end_minutes:
            report.conflicts.append(ScheduleConflict(
                day=day,
                conflict_type=ConflictType.OUTSIDE_HOURS,
                message=(
                    f"{label}: end ({staff_day.end}) is after the "
                    f"barbershop closes ({business_day.end})"
                ),
            ))

    return report
