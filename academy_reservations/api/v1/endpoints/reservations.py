# academy_reservations/api/v1/endpoints/reservations.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from academy_reservations.api import deps
from academy_reservations.constants.reservation import ReservationStatus, StaffRole
from academy_reservations.core.config import settings
from academy_reservations.core.limiter import limiter
from academy_reservations.schemas.reservation import (
    ClassCapacityResponse,
    ReservationCreate,
    ReservationCreatedResponse,
    ReservationFilters,
    ReservationListItem,
    ReservationPage,
    ReservationResponse,
)
from academy_reservations.schemas.token import TokenPayload
from academy_reservations.services.reservations import ReservationService
from academy_reservations.utils.pagination import paginate, pagination_meta

router = APIRouter(prefix="/reservations", tags=["Reservations"])

require_staff = deps.require_roles(StaffRole.ADMIN, StaffRole.INSTRUCTOR, StaffRole.RECEPTIONIST)
require_admin = deps.require_roles(StaffRole.ADMIN)


def get_reservation_filters(
    class_id: Optional[str] = None,
    student_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> ReservationFilters:
    try:
        return ReservationFilters(
            class_id=class_id,
            student_id=student_id,
            status=status_filter,
            date_from=date_from,
            date_to=date_to,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="; ".join(error["msg"] for error in e.errors()),
        )


@router.get("", response_model=ReservationPage)
def list_reservations(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    filters: ReservationFilters = Depends(get_reservation_filters),
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    List reservations ordered by class start time, then status, then queue
    position.

    Overdue confirmations matching the filters are expired (and their slots
    handed to the waitlist) before the page is read.
    """
    params = paginate(page, limit)
    items, total_count = service.find_all(db, filters=filters, page=params)
    return {
        "items": [ReservationResponse.model_validate(item) for item in items],
        "pagination": pagination_meta(params, total_count),
    }


@router.get("/class/{class_id}", response_model=List[ReservationListItem])
def list_class_reservations(
    class_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Roster of a class: confirmed first, then the waitlist in queue order."""
    roster = service.find_by_class(db, class_id=class_id)
    return [ReservationListItem.model_validate(entry) for entry in roster]


@router.get("/class/{class_id}/capacity", response_model=ClassCapacityResponse)
def get_class_capacity(
    class_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    capacity = service.get_capacity(db, class_id=class_id)
    return ClassCapacityResponse(
        class_id=capacity.class_id,
        capacity=capacity.capacity,
        confirmed=capacity.confirmed,
        waitlisted=capacity.waitlisted,
        available=capacity.available,
        is_full=not capacity.has_free_slot,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    entry = service.find_by_id(db, reservation_id=reservation_id)
    return ReservationResponse.model_validate(entry)


@router.post("", response_model=ReservationCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RESERVATION_CREATE_RATE_LIMIT)
def create_reservation(
    request: Request,  # Required for rate limiting
    reservation_in: ReservationCreate,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Book a class for a student.

    **Errors**:
    - 400: Class cancelled or already started
    - 404: Class or student not found
    - 409: Student already has a reservation for this class
    """
    entry = service.create(
        db,
        class_id=reservation_in.class_id,
        student_id=reservation_in.student_id,
    )
    if entry.status == ReservationStatus.WAITLISTED:
        message = f"Class is full. Added to the waitlist at position {entry.queue_position}"
    else:
        message = "Reservation confirmed"

    return {
        "message": message,
        "reservation": ReservationResponse.model_validate(entry),
    }


@router.patch("/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(
    reservation_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    entry = service.cancel(db, reservation_id=reservation_id)
    return ReservationResponse.model_validate(entry)


@router.patch("/{reservation_id}/confirm", response_model=ReservationResponse)
def confirm_reservation(
    reservation_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(require_staff),
):
    """
    Confirm a waitlisted reservation directly (front desk override).

    **Authorization**: ADMIN, INSTRUCTOR or RECEPTIONIST
    """
    entry = service.confirm(db, reservation_id=reservation_id)
    return ReservationResponse.model_validate(entry)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reservation(
    reservation_id: str,
    db: Session = Depends(deps.get_db),
    service: ReservationService = Depends(deps.get_reservation_service),
    current_user: TokenPayload = Depends(require_admin),
):
    """Hard delete. **Authorization**: ADMIN"""
    service.delete(db, reservation_id=reservation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
