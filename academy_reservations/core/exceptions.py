"""Domain exceptions raised by the reservation engine.

Every error the engine raises on purpose derives from ReservationError and
carries the HTTP status code the API layer should answer with. The API layer
registers a single handler for the base class.
"""


class ReservationError(Exception):
    """Base exception for reservation engine errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(ReservationError):
    """Raised when a class, student or reservation does not exist."""

    status_code = 404


class ConflictError(ReservationError):
    """Raised when a reservation already exists for the same class and student.

    Also raised when a concurrent booking wins the unique-key race on
    (class_id, student_id) between our existence check and the insert.
    """

    status_code = 409


class BadRequestError(ReservationError):
    """Raised when the request is well-formed but breaks a booking rule.

    Examples: booking a cancelled class, booking or cancelling a class that
    has already started, cancelling twice.
    """

    status_code = 400


class InvalidTransitionError(BadRequestError):
    """Raised when a reservation cannot move from its current status."""

    def __init__(self, current_status: str, new_status: str, message: str = None):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            message
            or f"Invalid status transition from '{current_status}' to '{new_status}'"
        )
