# academy_reservations/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

from academy_reservations import scheduler
from academy_reservations.api.v1.api import api_router
from academy_reservations.core.config import settings
from academy_reservations.core.exceptions import ReservationError
from academy_reservations.core.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    if settings.ENABLE_SCHEDULER:
        scheduler.init_scheduler()
    yield
    logger.info("Application shutting down...")
    scheduler.shutdown_scheduler()


app = FastAPI(
    title="Academy Reservations Service",
    version="1.0.0",
    description="""
        Class reservation queue for the academy.

        ## Features

        * **Booking**: Confirmed while a class has free slots, waitlisted after
        * **Waitlist**: Contiguous queue positions, promotion when a slot frees up
        * **Expiration**: Unconfirmed slots lapse after the confirmation window

        ## Authentication

        All reservation endpoints require JWT authentication via the
        `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"detail": "Request conflicts with existing data"},
    )


origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Academy Reservations Service is running"}
