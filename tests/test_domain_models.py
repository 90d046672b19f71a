"""
Tests for domain models.
"""

from datetime import date

import pytest

from slotresolver.domain.models import (
    BookedAppointment,
    DaySchedule,
    ScheduleSource,
    SpecialHours,
    ValidationReason,
    ValidationResult,
    day_name,
    is_time_in_range,
    minutes_to_time,
    normalize_time,
    time_to_minutes,
    to_date,
)


class TestTimeHelpers:
    """Tests for time-of-day conversions."""

    def test_normalize_time(self):
        assert normalize_time("9:05") == "09:05"
        assert normalize_time("18:00:00") == "18:00"
        assert normalize_time(" 07:30 ") == "07:30"

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "1200", ""])
    def test_normalize_time_rejects_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid time"):
            normalize_time(value)

    def test_minutes_round_trip(self):
        assert time_to_minutes("14:30") == 870
        assert minutes_to_time(870) == "14:30"
        assert minutes_to_time(0) == "00:00"

    def test_minutes_out_of_range(self):
        with pytest.raises(ValueError):
            minutes_to_time(24 * 60)

    def test_is_time_in_range_is_half_open(self):
        assert is_time_in_range("09:00", "09:00", "18:00")
        assert is_time_in_range("17:59", "09:00", "18:00")
        assert not is_time_in_range("18:00", "09:00", "18:00")


class TestDates:
    """Tests for date coercion and weekday names."""

    def test_to_date_from_string(self):
        assert to_date("2024-11-25") == date(2024, 11, 25)

    def test_to_date_invalid_string(self):
        with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
            to_date("25.11.2024")

    def test_day_name(self):
        assert day_name("2024-11-25") == "monday"
        assert day_name(date(2024, 11, 24)) == "sunday"


class TestDaySchedule:
    """Tests for DaySchedule invariants."""

    def test_valid_schedule_with_break(self):
        schedule = DaySchedule(True, "9:00", "18:00:00", "12:00", "13:00")

        assert schedule.start == "09:00"
        assert schedule.end == "18:00"
        assert schedule.has_break
        assert schedule.break_window() == (720, 780)
        assert schedule.format_hours() == "09:00 - 18:00 (break 12:00 - 13:00)"

    def test_start_after_end_raises(self):
        with pytest.raises(ValueError, match="must not be after"):
            DaySchedule(True, "18:00", "09:00")

    def test_break_outside_hours_raises(self):
        with pytest.raises(ValueError, match="must lie within"):
            DaySchedule(True, "09:00", "18:00", "17:30", "18:30")

    def test_empty_break_raises(self):
        with pytest.raises(ValueError, match="must lie within"):
            DaySchedule(True, "09:00", "18:00", "12:00", "12:00")

    def test_half_specified_break_is_ignored(self):
        schedule = DaySchedule(True, "09:00", "18:00", "12:00", None)

        assert not schedule.has_break
        assert schedule.break_window() is None

    def test_closed_day_skips_invariants(self):
        schedule = DaySchedule(False, "18:00", "09:00")

        assert not schedule.enabled
        assert schedule.format_hours() == "closed"


class TestInputRecords:
    """Tests for special hours and bookings."""

    def test_open_special_hours_need_times(self):
        with pytest.raises(ValueError, match="missing open/close times"):
            SpecialHours("2024-12-24", True, "09:00", None)

    def test_special_date_is_normalized(self):
        special = SpecialHours(date(2024, 12, 24), False)

        assert special.special_date == "2024-12-24"

    def test_booking_interval(self):
        booking = BookedAppointment("14:00:00", 45)

        assert booking.time == "14:00"
        assert booking.start_minutes == 840
        assert booking.end_minutes == 885

    def test_booking_duration_must_be_positive(self):
        with pytest.raises(ValueError, match="must be positive"):
            BookedAppointment("14:00", 0)


class TestValidationResult:
    """Tests for caller-facing messages."""

    def test_break_message(self):
        schedule = DaySchedule(True, "09:00", "18:00", "12:00", "13:00")
        result = ValidationResult.fail(ValidationReason.INSIDE_BREAK, ScheduleSource.BUSINESS, schedule)

        assert result.message == "Time falls within the break (12:00 - 13:00)"

    def test_special_closed_message(self):
        result = ValidationResult.fail(ValidationReason.CLOSED_SPECIAL_DAY, ScheduleSource.SPECIAL)

        assert "special hours" in result.message

    def test_ok_message(self):
        result = ValidationResult.ok(DaySchedule(True, "09:00", "12:00"), ScheduleSource.STAFF)

        assert result.is_valid
        assert result.reason is None
        assert result.message == "Available (09:00 - 12:00)"
