# academy_reservations/services/reservations/promotion.py
"""
Promotion engine: hands a freed confirmed slot to the head of the waitlist.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.reservation import Reservation
from academy_reservations.services.reservations.capacity import load_capacity
from academy_reservations.services.reservations.waitlist import waitlist_head
from academy_reservations.utils.validators import validate_status_transition

logger = logging.getLogger(__name__)


def promote_next(
    db: Session,
    gym_class: GymClass,
    *,
    now: datetime,
    window: timedelta
) -> Optional[Reservation]:
    """
    Promote the lowest-positioned WAITLISTED reservation of the class.

    The promoted reservation gets confirmed_at = now and a new deadline of
    now + window. Does nothing when the waitlist is empty or the class has
    no free slot. The caller renumbers the waitlist afterwards.

    Must run inside the caller's transaction with the class row locked.
    """
    capacity = load_capacity(db, gym_class)
    if not capacity.has_free_slot:
        logger.info(
            f"No free slot in class {gym_class.id} "
            f"({capacity.confirmed}/{capacity.capacity}), skipping promotion"
        )
        return None

    head = waitlist_head(db, gym_class.id)
    if head is None:
        logger.debug(f"Waitlist empty for class {gym_class.id}, slot stays free")
        return None

    validate_status_transition(head.status, ReservationStatus.CONFIRMED)

    former_position = head.queue_position
    head.status = ReservationStatus.CONFIRMED
    head.queue_position = None
    head.confirmed_at = now
    head.expires_at = now + window
    db.flush()

    logger.info(
        f"Promoted reservation {head.id} (student {head.student_id}) from waitlist "
        f"position {former_position} in class {gym_class.id}, expires at {head.expires_at}"
    )
    return head
