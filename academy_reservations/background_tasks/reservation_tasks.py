# academy_reservations/background_tasks/reservation_tasks.py
"""
Background task for reservation expiration.

Reads already sweep lazily, but a class nobody looks at would keep overdue
confirmations (and a stuck waitlist) until its next access. This job walks
every class with overdue confirmations and runs the same sweep.

- sweep_expired_reservations(): every RESERVATION_SWEEP_INTERVAL_MINUTES
"""

import logging

import redis

from academy_reservations.db.redis import get_redis_client
from academy_reservations.db.session import SessionLocal
from academy_reservations.services.reservations import reservation_service

logger = logging.getLogger(__name__)

SWEEP_LOCK_KEY = "reservations:sweep_lock"
SWEEP_LOCK_TTL_SECONDS = 60


def sweep_expired_reservations(service=None) -> int:
    """
    Expire overdue confirmations in every class and promote from the waitlists.

    A Redis lock keeps concurrent application instances from sweeping at the
    same time. When Redis is unreachable the sweep still runs: the class row
    locks taken by the service keep it correct, only less efficient.

    Each class is swept in its own transaction; a failure in one class is
    logged and the job moves on to the next.

    Returns the number of reservations expired.
    """
    service = service or reservation_service
    db = SessionLocal()
    redis_client = get_redis_client()
    lock_acquired = False
    expired_total = 0

    try:
        try:
            lock_acquired = bool(
                redis_client.set(SWEEP_LOCK_KEY, "1", nx=True, ex=SWEEP_LOCK_TTL_SECONDS)
            )
            if not lock_acquired:
                logger.debug("Skipping reservation sweep - another instance holds the lock")
                return 0
        except redis.RedisError as e:
            logger.warning(f"Redis unavailable, sweeping without distributed lock: {e}")

        class_ids = service.classes_due_for_sweep(db)
        for class_id in class_ids:
            try:
                expired_total += service.sweep_class(db, class_id=class_id)
            except Exception as e:
                # The service already rolled back; the next run (or read) retries
                logger.error(f"Error sweeping reservations for class {class_id}: {e}")

        if expired_total:
            logger.info(
                f"Reservation sweep expired {expired_total} reservations "
                f"across {len(class_ids)} classes"
            )
        return expired_total

    except Exception as e:
        logger.error(f"Error sweeping expired reservations: {e}")
        db.rollback()
        return expired_total

    finally:
        if lock_acquired:
            try:
                redis_client.delete(SWEEP_LOCK_KEY)
            except redis.RedisError as e:
                logger.warning(f"Could not release reservation sweep lock: {e}")
        db.close()
        redis_client.close()


# For testing/manual execution
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Running sweep_expired_reservations...")
    print(f"Expired {sweep_expired_reservations()} reservations")
