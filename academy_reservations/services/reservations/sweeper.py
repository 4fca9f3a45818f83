# academy_reservations/services/reservations/sweeper.py
"""
Lazy expiration of CONFIRMED reservations.

Expiration is only observed when something touches a class's reservations:
the lifecycle operations call sweep_class() before they look at capacity or
the queue. The periodic job in background_tasks reuses the same function.
"""

import logging
from datetime import datetime, timedelta
from typing import List

from sqlalchemy.orm import Session

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.crud.crud_reservation import reservation as reservation_crud
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.reservation import Reservation
from academy_reservations.services.reservations.promotion import promote_next
from academy_reservations.services.reservations.waitlist import renumber
from academy_reservations.utils.validators import validate_status_transition

logger = logging.getLogger(__name__)


def sweep_class(
    db: Session,
    gym_class: GymClass,
    *,
    now: datetime,
    window: timedelta
) -> List[Reservation]:
    """
    Expire every overdue CONFIRMED reservation of the class.

    Each expiration is followed by exactly one promotion attempt, in
    deadline order; the waitlist is renumbered once at the end.
    Returns the reservations that were expired (empty list when nothing was due).

    Must run inside the caller's transaction with the class row locked.
    """
    overdue = reservation_crud.get_expired_confirmed(db, class_id=gym_class.id, now=now)
    if not overdue:
        return []

    promoted = 0
    for entry in overdue:
        validate_status_transition(entry.status, ReservationStatus.EXPIRED)
        deadline = entry.expires_at
        entry.status = ReservationStatus.EXPIRED
        entry.expires_at = None
        db.flush()

        logger.info(
            f"Expired reservation {entry.id} (student {entry.student_id}) "
            f"in class {gym_class.id}, deadline was {deadline}"
        )

        if promote_next(db, gym_class, now=now, window=window) is not None:
            promoted += 1

    renumber(db, gym_class.id)

    logger.info(
        f"Sweep of class {gym_class.id}: {len(overdue)} expired, {promoted} promoted"
    )
    return overdue
