"""
Tests for schedule normalization and staff conflict checks.
"""

import pytest

from slotresolver.domain.conflicts import ConflictSeverity, ConflictType, find_schedule_conflicts
from slotresolver.domain.models import DaySchedule, SpecialHours
from slotresolver.domain.schedules import (
    business_hours_to_schedule,
    normalize_day_name,
    normalize_day_schedule,
    special_hours_to_schedule,
    staff_schedule_for_day,
    weekly_staff_schedule,
)


class TestNormalization:
    """Tests for converting stored shapes into DaySchedule."""

    def test_day_names_and_numbers(self):
        assert normalize_day_name("Monday") == "monday"
        assert normalize_day_name(0) == "sunday"
        assert normalize_day_name("6") == "saturday"

    @pytest.mark.parametrize("value", [7, "funday", True])
    def test_invalid_day(self, value):
        with pytest.raises(ValueError):
            normalize_day_name(value)

    def test_legacy_key_aliases(self):
        """enabled/is_open/is_working and start/open_time are interchangeable."""
        standard = normalize_day_schedule({"enabled": True, "start": "10:00", "end": "19:00"})
        legacy = normalize_day_schedule({"is_open": True, "open_time": "10:00", "close_time": "19:00"})
        working = normalize_day_schedule({"is_working": True, "start": "10:00", "close_time": "19:00"})

        assert standard == legacy == working

    def test_missing_fields_use_defaults(self):
        schedule = normalize_day_schedule({"enabled": True})

        assert schedule == DaySchedule(True, "09:00", "18:00")

    def test_missing_entry_is_day_off(self):
        assert normalize_day_schedule(None) == DaySchedule.closed()
        assert not normalize_day_schedule({}).enabled

    def test_business_hours_rows(self):
        rows = [
            {"day_of_week": 1, "is_open": True, "open_time": "09:00:00", "close_time": "18:00:00",
             "break_start": "12:00:00", "break_end": "13:00:00"},
            {"day_of_week": "sunday", "is_open": False, "open_time": None, "close_time": None},
        ]

        weekly = business_hours_to_schedule(rows)

        assert weekly["monday"] == DaySchedule(True, "09:00", "18:00", "12:00", "13:00")
        assert not weekly["sunday"].enabled
        assert "tuesday" not in weekly

    def test_special_hours(self):
        assert not special_hours_to_schedule(SpecialHours("2024-12-25", False)).enabled
        assert special_hours_to_schedule(
            SpecialHours("2024-12-24", True, "08:00", "12:00")
        ) == DaySchedule(True, "08:00", "12:00")


class TestStaffScheduleLookup:
    """Tests for single-unit and multi-unit staff schedules."""

    def test_single_unit(self):
        schedule = {"monday": {"enabled": True, "start": "10:00", "end": "16:00"}}

        assert staff_schedule_for_day(schedule, "monday").start == "10:00"
        assert staff_schedule_for_day(schedule, "tuesday") is None
        assert staff_schedule_for_day(None, "monday") is None

    def test_multi_unit_requires_known_unit(self):
        schedule = {"units": {"centro": {"friday": {"enabled": True}}}}

        assert staff_schedule_for_day(schedule, "friday", "centro").enabled
        assert staff_schedule_for_day(schedule, "friday", "norte") is None
        assert staff_schedule_for_day(schedule, "friday") is None

    @pytest.mark.parametrize("schedule", [
        {"monday": True},
        {"units": {"centro": "weekdays"}},
        {"units": ["centro"]},
    ])
    def test_malformed_entries_raise_value_error(self, schedule):
        with pytest.raises(ValueError, match="must be a mapping"):
            staff_schedule_for_day(schedule, "monday", "centro")

    def test_weekly_staff_schedule(self):
        schedule = {"monday": {"enabled": True}, "sunday": {"enabled": False}}

        weekly = weekly_staff_schedule(schedule)

        assert set(weekly) == {"monday", "sunday"}


class TestScheduleConflicts:
    """Tests for checking staff schedules against business hours."""

    @pytest.fixture
    def business_hours(self):
        return {
            "monday": DaySchedule(True, "09:00", "18:00"),
            "tuesday": DaySchedule(True, "09:00", "18:00"),
            "sunday": DaySchedule.closed(),
        }

    def test_schedule_within_hours(self, business_hours):
        report = find_schedule_conflicts(
            {"monday": {"enabled": True, "start": "10:00", "end": "17:00"}},
            business_hours,
        )

        assert not report.has_conflicts
        assert report.can_save

    def test_working_on_closed_day(self, business_hours):
        report = find_schedule_conflicts(
            {"sunday": {"enabled": True}, "wednesday": {"enabled": True}},
            business_hours,
        )

        assert [c.day for c in report.conflicts] == ["wednesday", "sunday"]
        assert all(c.conflict_type is ConflictType.CLOSED_DAY for c in report.conflicts)
        assert not report.can_save

    def test_start_and_end_outside_hours(self, business_hours):
        report = find_schedule_conflicts(
            {"tuesday": {"enabled": True, "start": "08:00", "end": "19:00"}},
            business_hours,
        )

        tuesday = report.for_day("tuesday")
        assert len(tuesday) == 2
        assert all(c.conflict_type is ConflictType.OUTSIDE_HOURS for c in tuesday)
        assert all(c.severity is ConflictSeverity.ERROR for c in tuesday)
        assert report.error_count == 2
        assert report.warning_count == 0
        assert report.day_has_conflict("tuesday")
        assert not report.day_has_conflict("monday")

    def test_days_off_are_not_checked(self, business_hours):
        report = find_schedule_conflicts({"sunday": {"enabled": False}}, business_hours)

        assert not report.has_conflicts

    def test_multi_unit_schedule(self, business_hours):
        schedule = {"units": {"centro": {"monday": {"enabled": True, "start": "07:00", "end": "12:00"}}}}

        assert find_schedule_conflicts(schedule, business_hours, "centro").error_count == 1
        assert not find_schedule_conflicts(schedule, business_hours, "norte").has_conflicts
