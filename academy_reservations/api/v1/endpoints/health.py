# academy_reservations/api/v1/endpoints/health.py
"""
Health check endpoints for monitoring system status.
"""
from fastapi import APIRouter

from academy_reservations.scheduler import get_scheduler_status

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check():
    """Basic health check - API is responding."""
    return {"status": "healthy", "service": "academy-reservations"}


@router.get("/scheduler")
def scheduler_health():
    """Status of the periodic reservation sweep."""
    return get_scheduler_status()
