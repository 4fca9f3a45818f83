from unittest.mock import MagicMock

from academy_reservations.crud.crud_gym_class import CRUDGymClass
from academy_reservations.crud.crud_reservation import CRUDReservation
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.reservation import Reservation

# Instantiate the classes to test their methods
reservation_crud = CRUDReservation(Reservation)
gym_class_crud = CRUDGymClass(GymClass)


def test_add_flushes_without_committing():
    """
    Reservation writes are staged for the service's transaction.
    """
    db_session = MagicMock()
    entry = Reservation(class_id="cls_1", student_id="stu_1", status="CONFIRMED")

    result = reservation_crud.add(db=db_session, reservation=entry)

    assert result is entry
    db_session.add.assert_called_once_with(entry)
    db_session.flush.assert_called_once()
    db_session.commit.assert_not_called()


def test_delete_flushes_without_committing():
    db_session = MagicMock()
    entry = Reservation(id="rsv_1", class_id="cls_1", student_id="stu_1", status="CANCELLED")

    reservation_crud.delete(db=db_session, reservation=entry)

    db_session.delete.assert_called_once_with(entry)
    db_session.flush.assert_called_once()
    db_session.commit.assert_not_called()


def test_max_queue_position_defaults_to_zero():
    db_session = MagicMock()
    db_session.query.return_value.filter.return_value.scalar.return_value = None

    assert reservation_crud.get_max_queue_position(db_session, class_id="cls_1") == 0


def test_count_by_status_returns_scalar():
    db_session = MagicMock()
    db_session.query.return_value.filter.return_value.scalar.return_value = 3

    assert reservation_crud.count_by_status(db_session, class_id="cls_1", status="CONFIRMED") == 3


def test_lock_many_locks_in_sorted_order():
    """
    Classes are always locked in id order, whatever order they were asked for.
    """
    db_session = MagicMock()
    locked_ids = []

    def fake_get_for_update(db, *, class_id):
        locked_ids.append(class_id)
        return None if class_id == "cls_gone" else MagicMock(id=class_id)

    gym_class_crud.get_for_update = fake_get_for_update

    locked = gym_class_crud.lock_many(db_session, class_ids=["cls_c", "cls_a", "cls_gone", "cls_a"])

    assert locked_ids == ["cls_a", "cls_c", "cls_gone"]
    assert [c.id for c in locked] == ["cls_a", "cls_c"]
