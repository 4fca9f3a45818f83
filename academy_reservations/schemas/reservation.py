# academy_reservations/schemas/reservation.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from academy_reservations.constants.reservation import ReservationStatus
from academy_reservations.schemas.gym_class import GymClassSummary
from academy_reservations.schemas.student import StudentSummary


class ReservationCreate(BaseModel):
    class_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)


class ReservationFilters(BaseModel):
    """Optional filters for the reservation listing."""
    class_id: Optional[str] = None
    student_id: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.upper()
        if not ReservationStatus.is_valid(v):
            raise ValueError(
                f"status must be one of {', '.join(ReservationStatus.all_values())}"
            )
        return v

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must be on or before date_to")
        return self


class ReservationResponse(BaseModel):
    id: str
    class_id: str
    student_id: str
    status: str
    queue_position: Optional[int] = None
    reserved_at: datetime
    confirmed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    gym_class: GymClassSummary
    student: StudentSummary

    model_config = {"from_attributes": True}


class ReservationListItem(BaseModel):
    """Compact roster row returned when listing a single class."""
    id: str
    status: str
    queue_position: Optional[int] = None
    reserved_at: datetime
    student: StudentSummary

    model_config = {"from_attributes": True}


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class ReservationPage(BaseModel):
    items: List[ReservationResponse]
    pagination: PaginationMeta


class ClassCapacityResponse(BaseModel):
    class_id: str
    capacity: Optional[int] = None
    confirmed: int
    waitlisted: int
    available: Optional[int] = None
    is_full: bool


class ReservationCreatedResponse(BaseModel):
    message: str
    reservation: ReservationResponse
