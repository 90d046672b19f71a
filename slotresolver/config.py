"""
Configuration management using Pydantic models loaded from YAML.

The shop file holds both settings and the schedule snapshot (business
hours, special hours, blocked dates, staff schedules, bookings) that the
managed backend would otherwise provide.
"""

from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    DAY_NAMES,
    BookedAppointment,
    DaySchedule,
    SpecialHours,
    WeeklySchedule,
    minutes_to_time,
    normalize_time,
)
from .domain.schedules import (
    business_hours_to_schedule,
    is_multi_unit_schedule,
    normalize_day_name,
    special_hours_to_schedule,
    weekly_staff_schedule,
)


def _coerce_time(value: Any) -> Any:
    """Accept HH:MM strings and YAML's base-60 reading of unquoted times."""
    if value is None:
        return None
    # YAML 1.1 reads an unquoted 18:00 as the integer 1080
    if isinstance(value, int) and not isinstance(value, bool):
        return minutes_to_time(value)
    return normalize_time(value)


_STAFF_TIME_KEYS = ("start", "end", "open_time", "close_time", "break_start", "break_end")


def _coerce_weekly_times(weekly: Any, where: str) -> Dict[str, Any]:
    """Coerce the time fields of each day entry in a stored weekly schedule."""
    if weekly is None:
        return {}
    if not isinstance(weekly, dict):
        raise ValueError(f"Schedule for {where} must be a mapping, got {weekly!r}")

    coerced: Dict[str, Any] = {}
    for day, entry in weekly.items():
        if entry is None:
            coerced[day] = None
            continue
        if not isinstance(entry, dict):
            raise ValueError(f"Entry for '{day}' in {where} must be a mapping, got {entry!r}")
        coerced[day] = {
            key: _coerce_time(raw) if key in _STAFF_TIME_KEYS else raw
            for key, raw in entry.items()
        }
    return coerced


class DefaultsConfig(BaseModel):
    """Default settings for searches."""
    service_duration_minutes: int = 30
    search_days: int = 7

    @field_validator("service_duration_minutes", "search_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure defaults are positive."""
        if value <= 0:
            raise ValueError("defaults must be greater than zero")
        return value


class BusinessHoursEntry(BaseModel):
    """One weekday of the shop's regular hours."""
    day_of_week: str
    is_open: bool = True
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def validate_day(cls, value: Union[str, int]) -> str:
        return normalize_day_name(value)

    @field_validator("open_time", "close_time", "break_start", "break_end", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> Optional[str]:
        return _coerce_time(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "BusinessHoursEntry":
        """Ensure the window opens before it closes and holds the break."""
        self.to_day_schedule()
        return self

    def to_day_schedule(self) -> DaySchedule:
        return business_hours_to_schedule([self.model_dump()])[self.day_of_week]


class SpecialHoursEntry(BaseModel):
    """An override for one calendar date."""
    special_date: date
    is_open: bool = False
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @field_validator("open_time", "close_time", "break_start", "break_end", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> Optional[str]:
        return _coerce_time(value)

    @model_validator(mode="after")
    def validate_open_hours(self) -> "SpecialHoursEntry":
        """An open special day needs its hours."""
        if self.is_open and not (self.open_time and self.close_time):
            raise ValueError(
                f"special_hours for {self.special_date} is open but has no open_time/close_time"
            )
        special_hours_to_schedule(self.to_domain())
        return self

    def to_domain(self) -> SpecialHours:
        return SpecialHours(
            special_date=self.special_date.isoformat(),
            is_open=self.is_open,
            open_time=self.open_time,
            close_time=self.close_time,
            break_start=self.break_start,
            break_end=self.break_end,
        )


class StaffMember(BaseModel):
    """Staff member with an optional personal schedule."""
    id: str
    name: str
    active: bool = True
    schedule: Optional[Dict[str, Any]] = None

    @field_validator("schedule", mode="before")
    @classmethod
    def coerce_schedule_times(cls, value: Any) -> Any:
        """Convert unquoted YAML times in every day entry to HH:MM."""
        if not isinstance(value, dict):
            return value

        if is_multi_unit_schedule(value):
            units = value.get("units") or {}
            if not isinstance(units, dict):
                raise ValueError(f"Staff schedule units must be a mapping, got {units!r}")
            return {
                **value,
                "units": {
                    unit_id: _coerce_weekly_times(weekly, f"unit '{unit_id}'")
                    for unit_id, weekly in units.items()
                },
            }
        return _coerce_weekly_times(value, "staff schedule")

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Ensure every stored day entry normalizes cleanly."""
        if not value:
            return value

        if is_multi_unit_schedule(value):
            for unit_id in (value.get("units") or {}):
                weekly_staff_schedule(value, unit_id)
        else:
            unknown = [day for day in value if day not in DAY_NAMES]
            if unknown:
                raise ValueError(f"Unknown day(s) in staff schedule: {unknown}")
            weekly_staff_schedule(value)
        return value


class AppointmentEntry(BaseModel):
    """An existing booking."""
    appointment_date: date
    time: str
    duration: int
    staff_id: Optional[str] = None
    status: str = "confirmed"

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> str:
        return _coerce_time(value)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("duration must be greater than zero")
        return value

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() == "cancelled"

    def to_domain(self) -> BookedAppointment:
        return BookedAppointment(time=self.time, duration=self.duration)


class ShopConfig(BaseModel):
    """Barbershop configuration and schedule snapshot."""
    shop_name: str = "Barbershop"
    timezone: str = "America/Sao_Paulo"
    unit_id: Optional[str] = None
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    business_hours: List[BusinessHoursEntry] = Field(default_factory=list)
    special_hours: List[SpecialHoursEntry] = Field(default_factory=list)
    blocked_dates: List[date] = Field(default_factory=list)
    staff: List[StaffMember] = Field(default_factory=list)
    appointments: List[AppointmentEntry] = Field(default_factory=list)

    @field_validator("business_hours")
    @classmethod
    def validate_business_days(cls, value: List[BusinessHoursEntry]) -> List[BusinessHoursEntry]:
        """Ensure each weekday is configured at most once."""
        days = [entry.day_of_week for entry in value]
        duplicates = sorted({day for day in days if days.count(day) > 1})
        if duplicates:
            raise ValueError(f"Duplicate business_hours day(s): {duplicates}")
        return value

    @field_validator("special_hours")
    @classmethod
    def validate_special_dates(cls, value: List[SpecialHoursEntry]) -> List[SpecialHoursEntry]:
        """Ensure each special date appears once."""
        seen: set[date] = set()
        for entry in value:
            if entry.special_date in seen:
                raise ValueError(f"Duplicate special_hours date: {entry.special_date}")
            seen.add(entry.special_date)
        return value

    @field_validator("staff")
    @classmethod
    def validate_staff(cls, value: List[StaffMember]) -> List[StaffMember]:
        """Ensure staff ids are unique."""
        seen_ids: set[str] = set()
        for member in value:
            if member.id in seen_ids:
                raise ValueError(f"Duplicate staff id detected: {member.id}")
            seen_ids.add(member.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "ShopConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML shop file

        Returns:
            ShopConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a shop.yaml file. See shop.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def weekly_business_hours(self) -> WeeklySchedule:
        """Business hours as a normalized weekly schedule."""
        return business_hours_to_schedule(
            entry.model_dump() for entry in self.business_hours
        )

    def find_staff(self, staff_id: str) -> StaffMember | None:
        """Find an active staff member by id."""
        for member in self.staff:
            if member.id == staff_id and member.active:
                return member
        return None

    def staff_schedules(self) -> Dict[str, Optional[Dict[str, Any]]]:
        """Personal schedules of active staff, keyed by staff id."""
        return {member.id: member.schedule for member in self.staff if member.active}


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for shop.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "shop.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "shop.yaml"

    return config_path
