# academy_reservations/db/redis.py
import redis
from academy_reservations.core.config import settings


def get_redis_client():
    """
    Creates and returns a new Redis client instance.
    Used by the background sweep job for its distributed lock.
    """
    return redis.from_url(settings.REDIS_URL, decode_responses=True)
