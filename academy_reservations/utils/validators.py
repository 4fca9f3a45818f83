"""
Validation helpers for reservation state changes.
"""

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.core.exceptions import InvalidTransitionError

# Allowed moves of the reservation state machine. Creation (no prior state)
# and hard deletion bypass this table.
ALLOWED_TRANSITIONS = {
    ReservationStatus.WAITLISTED: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {ReservationStatus.CANCELLED, ReservationStatus.EXPIRED},
    ReservationStatus.EXPIRED: {ReservationStatus.CANCELLED},
    ReservationStatus.NO_SHOW: {ReservationStatus.CANCELLED},
    ReservationStatus.CANCELLED: set(),  # Terminal state
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """
    Validate if a reservation status transition is allowed.

    Valid transitions:
    - WAITLISTED → CONFIRMED (promotion or manual confirm), CANCELLED
    - CONFIRMED → CANCELLED, EXPIRED
    - EXPIRED → CANCELLED
    - NO_SHOW → CANCELLED
    - CANCELLED → (terminal state, no transitions)

    Raises:
        InvalidTransitionError: If transition is invalid
    """
    allowed = ALLOWED_TRANSITIONS.get(current_status, set())

    if new_status not in allowed:
        raise InvalidTransitionError(current_status, new_status)

    return True
