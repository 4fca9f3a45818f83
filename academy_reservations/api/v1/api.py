# academy_reservations/api/v1/api.py

from fastapi import APIRouter
from academy_reservations.api.v1.endpoints import health, reservations

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(reservations.router)
api_router.include_router(health.router)
