# academy_reservations/services/reservations/capacity.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.crud.crud_reservation import reservation as reservation_crud
from academy_reservations.models.gym_class import GymClass


@dataclass(frozen=True)
class ClassCapacity:
    """Read-only view of a class's confirmed bookings against its limit."""

    class_id: str
    capacity: Optional[int]
    confirmed: int
    waitlisted: int = 0

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None

    @property
    def available(self) -> Optional[int]:
        """Free confirmed slots, None when the class has no limit."""
        if self.capacity is None:
            return None
        return max(0, self.capacity - self.confirmed)

    @property
    def has_free_slot(self) -> bool:
        return self.capacity is None or self.confirmed < self.capacity


def load_capacity(db: Session, gym_class: GymClass) -> ClassCapacity:
    """Count CONFIRMED and WAITLISTED reservations of a class right now."""
    return ClassCapacity(
        class_id=gym_class.id,
        capacity=gym_class.capacity,
        confirmed=reservation_crud.count_by_status(
            db, class_id=gym_class.id, status=ReservationStatus.CONFIRMED
        ),
        waitlisted=reservation_crud.count_by_status(
            db, class_id=gym_class.id, status=ReservationStatus.WAITLISTED
        ),
    )
