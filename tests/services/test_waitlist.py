# tests/services/test_waitlist.py
from datetime import timedelta

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.models.reservation import Reservation
from academy_reservations.services.reservations import (
    next_position,
    promote_next,
    renumber,
    waitlist_head,
)
from tests.utils.constants import NOW
from tests.utils.gym_class import create_random_class, tomorrow
from tests.utils.student import create_students

WINDOW = timedelta(minutes=15)


def add_reservation(db, gym_class, student, status, queue_position=None):
    entry = Reservation(
        class_id=gym_class.id,
        student_id=student.id,
        status=status,
        queue_position=queue_position,
        reserved_at=NOW,
    )
    db.add(entry)
    db.flush()
    return entry


def test_next_position_on_empty_waitlist_is_one(db):
    gym_class = create_random_class(db, start_time=tomorrow(NOW))

    assert next_position(db, gym_class.id) == 1
    assert waitlist_head(db, gym_class.id) is None


def test_renumber_closes_gaps_and_keeps_order(db):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=0)
    a, b, c = create_students(db, "Ana", "Bruno", "Carla")
    add_reservation(db, gym_class, a, ReservationStatus.WAITLISTED, 2)
    add_reservation(db, gym_class, b, ReservationStatus.WAITLISTED, 5)
    add_reservation(db, gym_class, c, ReservationStatus.WAITLISTED, 7)

    assert next_position(db, gym_class.id) == 8
    assert renumber(db, gym_class.id) == 3

    head = waitlist_head(db, gym_class.id)
    assert head.student_id == a.id
    assert head.queue_position == 1
    assert next_position(db, gym_class.id) == 4
    # Already contiguous
    assert renumber(db, gym_class.id) == 0


def test_promote_next_takes_head_when_slot_free(db):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b = create_students(db, "Ana", "Bruno")
    head = add_reservation(db, gym_class, a, ReservationStatus.WAITLISTED, 1)
    add_reservation(db, gym_class, b, ReservationStatus.WAITLISTED, 2)

    promoted = promote_next(db, gym_class, now=NOW, window=WINDOW)

    assert promoted is head
    assert promoted.status == ReservationStatus.CONFIRMED
    assert promoted.queue_position is None
    assert promoted.confirmed_at == NOW
    assert promoted.expires_at == NOW + WINDOW


def test_promote_next_skips_when_class_full(db):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b = create_students(db, "Ana", "Bruno")
    add_reservation(db, gym_class, a, ReservationStatus.CONFIRMED)
    waiting = add_reservation(db, gym_class, b, ReservationStatus.WAITLISTED, 1)

    assert promote_next(db, gym_class, now=NOW, window=WINDOW) is None
    assert waiting.status == ReservationStatus.WAITLISTED


def test_promote_next_with_empty_waitlist_is_noop(db):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=None)

    assert promote_next(db, gym_class, now=NOW, window=WINDOW) is None
