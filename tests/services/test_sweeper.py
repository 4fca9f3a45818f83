# tests/services/test_sweeper.py
from datetime import timedelta
from unittest.mock import patch

import pytest

from academy_reservations import crud
from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.services.reservations import as_utc, sweep_class
from tests.utils.constants import CONFIRMATION_WINDOW_MINUTES, NOW
from tests.utils.gym_class import create_random_class, tomorrow
from tests.utils.student import create_students

WINDOW = timedelta(minutes=CONFIRMATION_WINDOW_MINUTES)


def test_expired_confirmation_hands_slot_to_waitlist_head(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b, c = create_students(db, "Ana", "Bruno", "Carla")
    first = service.create(db, class_id=gym_class.id, student_id=a.id)
    second = service.create(db, class_id=gym_class.id, student_id=b.id)
    third = service.create(db, class_id=gym_class.id, student_id=c.id)

    later = clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    expired = service.sweep_class(db, class_id=gym_class.id)

    assert expired == 1
    for entry in (first, second, third):
        db.refresh(entry)
    assert first.status == ReservationStatus.EXPIRED
    assert first.expires_at is None
    assert second.status == ReservationStatus.CONFIRMED
    assert as_utc(second.confirmed_at) == later
    assert as_utc(second.expires_at) == later + WINDOW
    assert third.queue_position == 1


def test_sweep_is_idempotent(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b = create_students(db, "Ana", "Bruno")
    service.create(db, class_id=gym_class.id, student_id=a.id)
    service.create(db, class_id=gym_class.id, student_id=b.id)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    assert service.sweep_class(db, class_id=gym_class.id) == 1
    roster_after_first = [(r.id, r.status, r.queue_position) for r in service.find_by_class(db, class_id=gym_class.id)]

    assert service.sweep_class(db, class_id=gym_class.id) == 0
    roster_after_second = [(r.id, r.status, r.queue_position) for r in service.find_by_class(db, class_id=gym_class.id)]
    assert roster_after_first == roster_after_second


def test_multiple_expirations_promote_in_queue_order(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=2)
    a, b, c, d, e = create_students(db, "Ana", "Bruno", "Carla", "Davi", "Eva")
    service.create(db, class_id=gym_class.id, student_id=a.id)
    clock.advance(minutes=1)
    service.create(db, class_id=gym_class.id, student_id=b.id)
    for student in (c, d, e):
        service.create(db, class_id=gym_class.id, student_id=student.id)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    assert service.sweep_class(db, class_id=gym_class.id) == 2

    roster = {r.student_id: (r.status, r.queue_position) for r in service.find_by_class(db, class_id=gym_class.id)}
    assert roster[a.id] == (ReservationStatus.EXPIRED, None)
    assert roster[b.id] == (ReservationStatus.EXPIRED, None)
    assert roster[c.id] == (ReservationStatus.CONFIRMED, None)
    assert roster[d.id] == (ReservationStatus.CONFIRMED, None)
    assert roster[e.id] == (ReservationStatus.WAITLISTED, 1)


def test_expiration_without_waitlist_leaves_slot_free(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    (a,) = create_students(db, "Ana")
    service.create(db, class_id=gym_class.id, student_id=a.id)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    capacity = service.get_capacity(db, class_id=gym_class.id)

    assert capacity.confirmed == 0
    assert capacity.available == 1


def test_deadline_not_yet_reached_is_kept(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    (a,) = create_students(db, "Ana")
    entry = service.create(db, class_id=gym_class.id, student_id=a.id)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES - 1)

    assert service.sweep_class(db, class_id=gym_class.id) == 0
    db.refresh(entry)
    assert entry.status == ReservationStatus.CONFIRMED


def test_manual_confirmation_never_expires_and_blocks_overbooking(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b, c = create_students(db, "Ana", "Bruno", "Carla")
    service.create(db, class_id=gym_class.id, student_id=a.id)
    second = service.create(db, class_id=gym_class.id, student_id=b.id)
    third = service.create(db, class_id=gym_class.id, student_id=c.id)
    service.confirm(db, reservation_id=second.id)

    clock.advance(hours=3)
    assert service.sweep_class(db, class_id=gym_class.id) == 1

    db.refresh(second)
    db.refresh(third)
    assert second.status == ReservationStatus.CONFIRMED
    # B still holds the only slot, so C is not promoted
    assert third.status == ReservationStatus.WAITLISTED
    assert third.queue_position == 1


def test_sweep_expired_covers_every_class(db, service, clock):
    yoga = create_random_class(db, start_time=tomorrow(NOW), capacity=1, name="Yoga")
    judo = create_random_class(db, start_time=tomorrow(NOW), capacity=1, name="Judo")
    a, b = create_students(db, "Ana", "Bruno")
    service.create(db, class_id=yoga.id, student_id=a.id)
    service.create(db, class_id=judo.id, student_id=b.id)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    assert service.classes_due_for_sweep(db) == sorted([yoga.id, judo.id])
    assert service.sweep_expired(db) == 2
    assert service.classes_due_for_sweep(db) == []


def test_sweep_class_function_runs_inside_caller_transaction(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b = create_students(db, "Ana", "Bruno")
    service.create(db, class_id=gym_class.id, student_id=a.id)
    service.create(db, class_id=gym_class.id, student_id=b.id)

    now = clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    locked = crud.gym_class.get_for_update(db, class_id=gym_class.id)
    expired = sweep_class(db, locked, now=now, window=WINDOW)
    db.rollback()

    assert [entry.student_id for entry in expired] == [a.id]
    # Nothing committed: the rollback restores the original state
    assert crud.reservation.count_by_status(
        db, class_id=gym_class.id, status=ReservationStatus.EXPIRED
    ) == 0


def test_failed_promotion_rolls_back_the_whole_sweep(db, service, clock):
    gym_class = create_random_class(db, start_time=tomorrow(NOW), capacity=1)
    a, b = create_students(db, "Ana", "Bruno")
    first = service.create(db, class_id=gym_class.id, student_id=a.id)
    second = service.create(db, class_id=gym_class.id, student_id=b.id)
    deadline = as_utc(first.expires_at)

    clock.advance(minutes=CONFIRMATION_WINDOW_MINUTES + 1)
    with patch(
        "academy_reservations.services.reservations.sweeper.promote_next",
        side_effect=RuntimeError("promotion failed"),
    ):
        with pytest.raises(RuntimeError):
            service.sweep_class(db, class_id=gym_class.id)

    db.refresh(first)
    db.refresh(second)
    assert first.status == ReservationStatus.CONFIRMED
    assert as_utc(first.expires_at) == deadline
    assert (second.status, second.queue_position) == (ReservationStatus.WAITLISTED, 1)

    # Still due, and the next sweep completes
    assert service.classes_due_for_sweep(db) == [gym_class.id]
    assert service.sweep_class(db, class_id=gym_class.id) == 1
    db.refresh(second)
    assert second.status == ReservationStatus.CONFIRMED
