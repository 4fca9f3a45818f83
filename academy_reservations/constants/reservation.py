"""
Constants for reservation and class status values.

Provides type-safe constants to replace hardcoded strings throughout the codebase.
"""


class ReservationStatus:
    """Reservation status values."""
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [cls.CONFIRMED, cls.WAITLISTED, cls.EXPIRED, cls.CANCELLED, cls.NO_SHOW]

    @classmethod
    def is_valid(cls, status: str) -> bool:
        """Check if a status value is valid."""
        return status in cls.all_values()


class ClassStatus:
    """Class instance status values."""
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [cls.SCHEDULED, cls.IN_PROGRESS, cls.COMPLETED, cls.CANCELLED]

    @classmethod
    def is_valid(cls, status: str) -> bool:
        """Check if a status value is valid."""
        return status in cls.all_values()


class StaffRole:
    """Roles carried in the access token that the reservation API checks."""
    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"
    RECEPTIONIST = "RECEPTIONIST"
    STUDENT = "STUDENT"


# Listing order for a class roster: holders of a slot first, then the queue
STATUS_DISPLAY_ORDER = {
    ReservationStatus.CONFIRMED: 0,
    ReservationStatus.WAITLISTED: 1,
    ReservationStatus.EXPIRED: 2,
    ReservationStatus.NO_SHOW: 3,
    ReservationStatus.CANCELLED: 4,
}
