from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GymClassBase(BaseModel):
    name: str
    modality: Optional[str] = None
    instructor_name: Optional[str] = None
    start_time: datetime
    duration_minutes: int = Field(default=60, gt=0)
    capacity: Optional[int] = Field(default=None, ge=0)


class GymClassCreate(GymClassBase):
    status: str = "SCHEDULED"


class GymClassSummary(BaseModel):
    id: str
    name: str
    modality: Optional[str] = None
    instructor_name: Optional[str] = None
    start_time: datetime
    capacity: Optional[int] = None
    status: str

    model_config = {"from_attributes": True}
