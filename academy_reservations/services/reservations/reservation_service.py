# academy_reservations/services/reservations/reservation_service.py
"""
Reservation Lifecycle Service

Handles business logic for:
- Booking a class (confirmed when a slot is free, waitlisted otherwise)
- Cancelling, with promotion of the waitlist head when a slot frees up
- Manual confirmation of waitlisted reservations by staff
- Hard deletion by administrators
- Listings that always reflect lazily expired reservations

Every operation is one transaction. Operations on a class lock the class row
first, so capacity checks and queue positions are serialised per class.
"""

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy_reservations.constants.reservation import ClassStatus, ReservationStatus
from academy_reservations.core.config import settings
from academy_reservations.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ReservationError,
)
from academy_reservations.crud.crud_gym_class import gym_class as gym_class_crud
from academy_reservations.crud.crud_reservation import reservation as reservation_crud
from academy_reservations.crud.crud_student import student as student_crud
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.reservation import Reservation
from academy_reservations.schemas.reservation import ReservationFilters
from academy_reservations.services.reservations import waitlist
from academy_reservations.services.reservations.capacity import ClassCapacity, load_capacity
from academy_reservations.services.reservations.clock import Clock, SystemClock, as_utc
from academy_reservations.services.reservations.promotion import promote_next
from academy_reservations.services.reservations.sweeper import sweep_class
from academy_reservations.utils.pagination import PageParams
from academy_reservations.utils.validators import validate_status_transition

logger = logging.getLogger(__name__)

DUPLICATE_RESERVATION_MESSAGE = "A reservation already exists for this student in this class"
CONFLICT_MESSAGE = "Reservation conflicts with existing data"


def _is_duplicate_reservation(error: IntegrityError) -> bool:
    """True when the violated constraint is the (class_id, student_id) unique key."""
    detail = str(error.orig)
    return (
        "unique_class_student_reservation" in detail
        or ("UNIQUE constraint failed" in detail and "student_id" in detail)
    )


class ReservationService:
    """Service for the class reservation queue and its lifecycle."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        confirmation_window_minutes: Optional[int] = None
    ):
        self.clock = clock or SystemClock()
        if confirmation_window_minutes is None:
            confirmation_window_minutes = settings.RESERVATION_CONFIRMATION_WINDOW_MINUTES
        self.confirmation_window = timedelta(minutes=confirmation_window_minutes)

    # ========================================
    # Lifecycle Operations
    # ========================================

    def create(self, db: Session, *, class_id: str, student_id: str) -> Reservation:
        """
        Book a class for a student.

        CONFIRMED with a confirmation deadline when the class has a free slot
        (or no limit), otherwise WAITLISTED at the back of the queue.
        """
        now = self.clock.now()

        with self._transaction(db, f"create reservation for class {class_id}"):
            gym_class = self._lock_class(db, class_id)

            if gym_class.status == ClassStatus.CANCELLED:
                raise BadRequestError("Cannot book a cancelled class")
            if as_utc(gym_class.start_time) < now:
                raise BadRequestError("Cannot book a class that has already started")

            if student_crud.get(db, student_id) is None:
                raise NotFoundError("Student not found")

            existing = reservation_crud.get_by_class_and_student(
                db, class_id=class_id, student_id=student_id
            )
            if existing:
                raise ConflictError(DUPLICATE_RESERVATION_MESSAGE)

            self._sweep(db, gym_class, now)

            capacity = load_capacity(db, gym_class)
            new_reservation = Reservation(
                class_id=class_id,
                student_id=student_id,
                reserved_at=now,
            )
            if capacity.has_free_slot:
                new_reservation.status = ReservationStatus.CONFIRMED
                new_reservation.confirmed_at = now
                new_reservation.expires_at = now + self.confirmation_window
            else:
                new_reservation.status = ReservationStatus.WAITLISTED
                new_reservation.queue_position = waitlist.next_position(db, class_id)

            reservation_crud.add(db, reservation=new_reservation)
            reservation_id = new_reservation.id

        logger.info(
            f"Reservation {reservation_id} created for student {student_id} in class {class_id}: "
            f"{new_reservation.status}"
            + (f" at position {new_reservation.queue_position}" if new_reservation.queue_position else "")
        )
        return new_reservation

    def cancel(self, db: Session, *, reservation_id: str) -> Reservation:
        """
        Cancel a reservation.

        Cancelling a CONFIRMED reservation frees its slot, which is offered to
        the head of the waitlist (one promotion attempt).
        """
        now = self.clock.now()

        with self._transaction(db, f"cancel reservation {reservation_id}"):
            entry, gym_class = self._lock_reservation(db, reservation_id)
            self._sweep(db, gym_class, now)

            if entry.status == ReservationStatus.CANCELLED:
                raise BadRequestError("Reservation is already cancelled")
            if as_utc(gym_class.start_time) < now:
                raise BadRequestError("Cannot cancel a reservation for a class that has already started")

            previous_status = entry.status
            validate_status_transition(previous_status, ReservationStatus.CANCELLED)
            entry.status = ReservationStatus.CANCELLED
            entry.queue_position = None
            entry.expires_at = None
            db.flush()

            promoted = None
            if previous_status == ReservationStatus.CONFIRMED:
                promoted = promote_next(db, gym_class, now=now, window=self.confirmation_window)

            waitlist.renumber(db, gym_class.id)

        logger.info(
            f"Reservation {reservation_id} cancelled (was {previous_status})"
            + (f", promoted {promoted.id}" if promoted is not None else "")
        )
        return entry

    def confirm(self, db: Session, *, reservation_id: str) -> Reservation:
        """
        Staff override: confirm a WAITLISTED reservation directly.

        Unlike promotion this path sets no expiration deadline, so a manually
        confirmed reservation is never expired by the sweeper.
        """
        now = self.clock.now()

        with self._transaction(db, f"confirm reservation {reservation_id}"):
            entry, gym_class = self._lock_reservation(db, reservation_id)
            self._sweep(db, gym_class, now)

            if entry.status != ReservationStatus.WAITLISTED:
                raise BadRequestError("Only waitlisted reservations can be confirmed manually")

            validate_status_transition(entry.status, ReservationStatus.CONFIRMED)
            former_position = entry.queue_position
            entry.status = ReservationStatus.CONFIRMED
            entry.queue_position = None
            entry.confirmed_at = now
            entry.expires_at = None
            db.flush()

            waitlist.renumber(db, gym_class.id)

        logger.info(
            f"Reservation {reservation_id} confirmed manually from waitlist position {former_position}"
        )
        return entry

    def delete(self, db: Session, *, reservation_id: str) -> None:
        """
        Administrative purge. Removes the row without going through the state
        machine and without promoting anyone; the remaining waitlist is
        renumbered so positions stay contiguous.
        """
        with self._transaction(db, f"delete reservation {reservation_id}"):
            entry, gym_class = self._lock_reservation(db, reservation_id)
            previous_status = entry.status
            reservation_crud.delete(db, reservation=entry)
            waitlist.renumber(db, gym_class.id)

        logger.info(f"Reservation {reservation_id} deleted (was {previous_status})")

    # ========================================
    # Queries
    # ========================================

    def find_all(
        self,
        db: Session,
        *,
        filters: ReservationFilters,
        page: PageParams
    ) -> Tuple[List[Reservation], int]:
        """Filtered, paginated listing. Returns (items, total_count)."""
        now = self.clock.now()
        due = reservation_crud.get_class_ids_with_expired(db, now=now, filters=filters)
        self._sweep_classes(db, due, now)

        return reservation_crud.get_multi_filtered(
            db, filters=filters, skip=page.offset, limit=page.limit
        )

    def find_by_class(self, db: Session, *, class_id: str) -> List[Reservation]:
        """Roster of a class: CONFIRMED first, then the waitlist by position."""
        if gym_class_crud.get(db, class_id) is None:
            raise NotFoundError("Class not found")

        self._sweep_if_due(db, class_id)
        return reservation_crud.get_roster(db, class_id=class_id)

    def find_by_id(self, db: Session, *, reservation_id: str) -> Reservation:
        entry = reservation_crud.get(db, reservation_id)
        if entry is None:
            raise NotFoundError("Reservation not found")

        self._sweep_if_due(db, entry.class_id)

        entry = reservation_crud.get_with_relations(db, reservation_id=reservation_id)
        if entry is None:
            raise NotFoundError("Reservation not found")
        return entry

    def get_capacity(self, db: Session, *, class_id: str) -> ClassCapacity:
        gym_class = gym_class_crud.get(db, class_id)
        if gym_class is None:
            raise NotFoundError("Class not found")

        self._sweep_if_due(db, class_id)
        return load_capacity(db, gym_class)

    # ========================================
    # Sweeping
    # ========================================

    def classes_due_for_sweep(self, db: Session) -> List[str]:
        """Ids of classes holding overdue CONFIRMED reservations."""
        return reservation_crud.get_class_ids_with_expired(db, now=self.clock.now())

    def sweep_class(self, db: Session, *, class_id: str) -> int:
        """Expire and promote for one class in its own transaction. Returns expired count."""
        now = self.clock.now()
        with self._transaction(db, f"sweep class {class_id}"):
            gym_class = gym_class_crud.get_for_update(db, class_id=class_id)
            if gym_class is None:
                return 0
            expired = self._sweep(db, gym_class, now)
        return len(expired)

    def sweep_expired(self, db: Session) -> int:
        """Sweep every class with overdue reservations. Returns expired count."""
        return sum(
            self.sweep_class(db, class_id=class_id)
            for class_id in self.classes_due_for_sweep(db)
        )

    # ========================================
    # Internals
    # ========================================

    @contextmanager
    def _transaction(self, db: Session, action: str):
        """Commit on success, roll back on any failure."""
        try:
            yield
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if _is_duplicate_reservation(e):
                logger.warning(f"Failed to {action}: duplicate reservation, rolled back: {e.orig}")
                raise ConflictError(DUPLICATE_RESERVATION_MESSAGE) from e
            logger.error(f"Failed to {action}: constraint violation, rolled back: {e.orig}")
            raise ConflictError(CONFLICT_MESSAGE) from e
        except ReservationError:
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Failed to {action}, rolled back: {str(e)}", exc_info=True)
            db.rollback()
            raise

    def _lock_class(self, db: Session, class_id: str) -> GymClass:
        gym_class = gym_class_crud.get_for_update(db, class_id=class_id)
        if gym_class is None:
            raise NotFoundError("Class not found")
        return gym_class

    def _lock_reservation(self, db: Session, reservation_id: str) -> Tuple[Reservation, GymClass]:
        """Lock the owning class, then re-read the reservation under that lock."""
        entry = reservation_crud.get(db, reservation_id)
        if entry is None:
            raise NotFoundError("Reservation not found")

        gym_class = self._lock_class(db, entry.class_id)

        entry = reservation_crud.get_with_relations(db, reservation_id=reservation_id)
        if entry is None:
            raise NotFoundError("Reservation not found")
        return entry, gym_class

    def _sweep(self, db: Session, gym_class: GymClass, now) -> List[Reservation]:
        return sweep_class(db, gym_class, now=now, window=self.confirmation_window)

    def _sweep_classes(self, db: Session, class_ids: Iterable[str], now) -> None:
        class_ids = list(class_ids)
        if not class_ids:
            return
        with self._transaction(db, f"sweep classes {', '.join(class_ids)}"):
            for gym_class in gym_class_crud.lock_many(db, class_ids=class_ids):
                self._sweep(db, gym_class, now)

    def _sweep_if_due(self, db: Session, class_id: str) -> None:
        now = self.clock.now()
        filters = ReservationFilters(class_id=class_id)
        due = reservation_crud.get_class_ids_with_expired(db, now=now, filters=filters)
        self._sweep_classes(db, due, now)


# Singleton instance
reservation_service = ReservationService()
