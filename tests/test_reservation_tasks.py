from unittest.mock import MagicMock, patch

import pytest
import redis

from academy_reservations.background_tasks import reservation_tasks
from academy_reservations.background_tasks.reservation_tasks import (
    SWEEP_LOCK_KEY,
    sweep_expired_reservations,
)


@pytest.fixture
def mock_db():
    db = MagicMock()
    with patch.object(reservation_tasks, "SessionLocal", return_value=db):
        yield db


@pytest.fixture
def mock_redis():
    client = MagicMock()
    with patch.object(reservation_tasks, "get_redis_client", return_value=client):
        yield client


def test_sweeps_every_due_class_under_lock(mock_db, mock_redis):
    mock_redis.set.return_value = True
    service = MagicMock()
    service.classes_due_for_sweep.return_value = ["cls_a", "cls_b"]
    service.sweep_class.side_effect = [2, 1]

    assert sweep_expired_reservations(service) == 3

    mock_redis.set.assert_called_once_with(SWEEP_LOCK_KEY, "1", nx=True, ex=60)
    assert [c.kwargs["class_id"] for c in service.sweep_class.call_args_list] == ["cls_a", "cls_b"]
    mock_redis.delete.assert_called_once_with(SWEEP_LOCK_KEY)
    mock_db.close.assert_called_once()
    mock_redis.close.assert_called_once()


def test_skips_when_another_instance_holds_lock(mock_db, mock_redis):
    mock_redis.set.return_value = None
    service = MagicMock()

    assert sweep_expired_reservations(service) == 0

    service.classes_due_for_sweep.assert_not_called()
    mock_redis.delete.assert_not_called()
    mock_db.close.assert_called_once()


def test_runs_without_lock_when_redis_is_down(mock_db, mock_redis):
    mock_redis.set.side_effect = redis.ConnectionError("connection refused")
    service = MagicMock()
    service.classes_due_for_sweep.return_value = ["cls_a"]
    service.sweep_class.return_value = 1

    assert sweep_expired_reservations(service) == 1

    mock_redis.delete.assert_not_called()


def test_failure_in_one_class_does_not_stop_the_others(mock_db, mock_redis):
    mock_redis.set.return_value = True
    service = MagicMock()
    service.classes_due_for_sweep.return_value = ["cls_a", "cls_b"]
    service.sweep_class.side_effect = [RuntimeError("deadlock detected"), 4]

    assert sweep_expired_reservations(service) == 4

    mock_redis.delete.assert_called_once_with(SWEEP_LOCK_KEY)


def test_failure_listing_classes_rolls_back(mock_db, mock_redis):
    mock_redis.set.return_value = True
    service = MagicMock()
    service.classes_due_for_sweep.side_effect = RuntimeError("database unavailable")

    assert sweep_expired_reservations(service) == 0

    mock_db.rollback.assert_called_once()
    mock_redis.delete.assert_called_once_with(SWEEP_LOCK_KEY)
