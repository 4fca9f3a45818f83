# academy_reservations/crud/crud_gym_class.py
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from academy_reservations.crud.base import CRUDBase
from academy_reservations.models.gym_class import GymClass
from academy_reservations.schemas.gym_class import GymClassCreate


class CRUDGymClass(CRUDBase[GymClass, GymClassCreate]):
    """Lookups on the classes table used by the reservation engine."""

    def get_for_update(self, db: Session, *, class_id: str) -> Optional[GymClass]:
        """
        Load a class and lock its row until the current transaction ends.

        Every reservation operation for a class takes this lock first, so the
        expiration sweep, the capacity count and the confirm-vs-waitlist
        decision for that class are serialised.
        """
        return (
            db.query(self.model)
            .filter(self.model.id == class_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def lock_many(self, db: Session, *, class_ids: Iterable[str]) -> List[GymClass]:
        """Lock several classes, always in id order to avoid lock-order deadlocks."""
        locked = []
        for class_id in sorted(set(class_ids)):
            gym_class = self.get_for_update(db, class_id=class_id)
            if gym_class is not None:
                locked.append(gym_class)
        return locked


gym_class = CRUDGymClass(GymClass)
