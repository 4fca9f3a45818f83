# academy_reservations/services/reservations/waitlist.py
"""
Waitlist ordering for a class.

Positions of the WAITLISTED reservations of a class always read 1..N.
Every path that removes somebody from the queue calls renumber(), which
recomputes the sequence from the current order instead of shifting
individual positions.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from academy_reservations.crud.crud_reservation import reservation as reservation_crud
from academy_reservations.models.reservation import Reservation

logger = logging.getLogger(__name__)


def next_position(db: Session, class_id: str) -> int:
    """Position for a reservation joining the back of the queue."""
    return reservation_crud.get_max_queue_position(db, class_id=class_id) + 1


def waitlist_head(db: Session, class_id: str) -> Optional[Reservation]:
    return reservation_crud.get_waitlist_head(db, class_id=class_id)


def renumber(db: Session, class_id: str) -> int:
    """
    Recalculate positions 1..N for the class's waitlist, keeping prior order.
    Returns number of entries whose position changed.
    """
    entries = reservation_crud.get_waitlist(db, class_id=class_id)

    changed = 0
    for idx, entry in enumerate(entries, start=1):
        if entry.queue_position != idx:
            entry.queue_position = idx
            changed += 1

    if changed:
        db.flush()
        logger.debug(f"Renumbered waitlist for class {class_id}: {changed} position(s) moved")

    return changed
