"""
Domain-specific exception hierarchy for the slot resolver application.

Unavailable dates and times are not errors; they are reported through
``ValidationResult``. These exceptions cover broken input and data access.
"""


class SlotResolverError(Exception):
    """Base class for all application-level errors."""


class DataSourceError(SlotResolverError):
    """Raised when schedule or booking data cannot be fetched."""


class UnknownStaffError(DataSourceError):
    """Raised when a staff id is not known to the data source."""

    def __init__(self, staff_id: str):
        super().__init__(f"Unknown staff member: '{staff_id}'")
        self.staff_id = staff_id
