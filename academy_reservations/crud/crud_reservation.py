# academy_reservations/crud/crud_reservation.py
from datetime import datetime, time, timezone
from typing import List, Optional, Tuple

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session, aliased, joinedload

from academy_reservations.constants.reservation import ReservationStatus, STATUS_DISPLAY_ORDER
from academy_reservations.crud.base import CRUDBase
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.reservation import Reservation
from academy_reservations.schemas.reservation import ReservationCreate, ReservationFilters


class CRUDReservation(CRUDBase[Reservation, ReservationCreate]):
    """
    Data access for reservations.

    Nothing here commits: writes are flushed so that later queries in the same
    transaction see them, and the reservation service decides when to commit.
    """

    def get_with_relations(self, db: Session, *, reservation_id: str) -> Optional[Reservation]:
        """Get a reservation with its class and student eagerly loaded"""
        return (
            db.query(self.model)
            .options(joinedload(self.model.gym_class), joinedload(self.model.student))
            .filter(self.model.id == reservation_id)
            .populate_existing()
            .first()
        )

    def get_by_class_and_student(
        self,
        db: Session,
        *,
        class_id: str,
        student_id: str
    ) -> Optional[Reservation]:
        """Get the reservation for a specific class and student"""
        return db.query(self.model).filter(
            and_(
                self.model.class_id == class_id,
                self.model.student_id == student_id
            )
        ).first()

    def count_by_status(self, db: Session, *, class_id: str, status: str) -> int:
        """Count reservations of a class in the given status"""
        return (
            db.query(func.count(self.model.id))
            .filter(
                self.model.class_id == class_id,
                self.model.status == status,
            )
            .scalar()
        ) or 0

    def get_max_queue_position(self, db: Session, *, class_id: str) -> int:
        """Highest waitlist position of a class, 0 when the waitlist is empty"""
        return (
            db.query(func.max(self.model.queue_position))
            .filter(
                self.model.class_id == class_id,
                self.model.status == ReservationStatus.WAITLISTED,
            )
            .scalar()
        ) or 0

    def get_waitlist(self, db: Session, *, class_id: str) -> List[Reservation]:
        """All WAITLISTED reservations of a class, head of the queue first"""
        return (
            db.query(self.model)
            .filter(
                self.model.class_id == class_id,
                self.model.status == ReservationStatus.WAITLISTED,
            )
            .order_by(self.model.queue_position.asc(), self.model.reserved_at.asc())
            .all()
        )

    def get_waitlist_head(self, db: Session, *, class_id: str) -> Optional[Reservation]:
        """WAITLISTED reservation with the lowest queue position"""
        return (
            db.query(self.model)
            .filter(
                self.model.class_id == class_id,
                self.model.status == ReservationStatus.WAITLISTED,
            )
            .order_by(self.model.queue_position.asc())
            .first()
        )

    def get_expired_confirmed(
        self,
        db: Session,
        *,
        class_id: str,
        now: datetime
    ) -> List[Reservation]:
        """CONFIRMED reservations of a class whose deadline has passed, oldest deadline first"""
        return (
            db.query(self.model)
            .filter(
                self.model.class_id == class_id,
                self.model.status == ReservationStatus.CONFIRMED,
                self.model.expires_at.isnot(None),
                self.model.expires_at < now,
            )
            .order_by(self.model.expires_at.asc(), self.model.id.asc())
            .all()
        )

    def get_class_ids_with_expired(
        self,
        db: Session,
        *,
        now: datetime,
        filters: Optional[ReservationFilters] = None
    ) -> List[str]:
        """Ids of classes holding at least one overdue CONFIRMED reservation"""
        query = (
            db.query(self.model.class_id)
            .filter(
                self.model.status == ReservationStatus.CONFIRMED,
                self.model.expires_at.isnot(None),
                self.model.expires_at < now,
            )
        )
        if filters is not None:
            if filters.class_id:
                query = query.filter(self.model.class_id == filters.class_id)
            if filters.student_id:
                # Any class the student is booked in, whoever holds the overdue slot
                student_rows = aliased(self.model)
                student_classes = select(student_rows.class_id).where(
                    student_rows.student_id == filters.student_id
                )
                query = query.filter(self.model.class_id.in_(student_classes))

        return sorted(class_id for (class_id,) in query.distinct().all())

    def get_roster(self, db: Session, *, class_id: str) -> List[Reservation]:
        """
        Reservations of a class ordered for display:
        CONFIRMED first, then WAITLISTED by position, then everything else.
        """
        return (
            db.query(self.model)
            .options(joinedload(self.model.student))
            .filter(self.model.class_id == class_id)
            .order_by(
                self._status_order(),
                self.model.queue_position.asc(),
                self.model.reserved_at.asc(),
                self.model.id.asc(),
            )
            .all()
        )

    def get_multi_filtered(
        self,
        db: Session,
        *,
        filters: ReservationFilters,
        skip: int = 0,
        limit: int = 10
    ) -> Tuple[List[Reservation], int]:
        """Filtered, paginated listing. Returns (items, total_count)."""
        query = db.query(self.model).join(GymClass, self.model.class_id == GymClass.id)

        if filters.class_id:
            query = query.filter(self.model.class_id == filters.class_id)
        if filters.student_id:
            query = query.filter(self.model.student_id == filters.student_id)
        if filters.status:
            query = query.filter(self.model.status == filters.status)
        if filters.date_from:
            start_of_day = datetime.combine(filters.date_from, time.min, tzinfo=timezone.utc)
            query = query.filter(GymClass.start_time >= start_of_day)
        if filters.date_to:
            end_of_day = datetime.combine(filters.date_to, time.max, tzinfo=timezone.utc)
            query = query.filter(GymClass.start_time <= end_of_day)

        total_count = query.count()

        items = (
            query.options(joinedload(self.model.gym_class), joinedload(self.model.student))
            .order_by(
                GymClass.start_time.asc(),
                self._status_order(),
                self.model.queue_position.asc(),
                self.model.reserved_at.asc(),
                self.model.id.asc(),
            )
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total_count

    def add(self, db: Session, *, reservation: Reservation) -> Reservation:
        """Stage a new reservation and flush it (raises IntegrityError on a duplicate pair)"""
        db.add(reservation)
        db.flush()
        return reservation

    def delete(self, db: Session, *, reservation: Reservation) -> None:
        """Hard delete, flushed"""
        db.delete(reservation)
        db.flush()

    def _status_order(self):
        return case(STATUS_DISPLAY_ORDER, value=self.model.status, else_=len(STATUS_DISPLAY_ORDER))


reservation = CRUDReservation(Reservation)
