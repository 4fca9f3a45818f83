# academy_reservations/schemas/token.py
from pydantic import BaseModel, Field
from typing import Optional


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    # Staff role issued by the auth service: ADMIN, INSTRUCTOR, RECEPTIONIST, STUDENT
    role: Optional[str] = None
    academy_id: Optional[str] = Field(default=None, alias="academyId")
    exp: int  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,  # Allow populating by alias
        "from_attributes": True,
    }
