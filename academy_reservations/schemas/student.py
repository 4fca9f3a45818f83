from pydantic import BaseModel
from typing import Optional


class StudentCreate(BaseModel):
    name: str
    email: Optional[str] = None


class StudentSummary(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}
