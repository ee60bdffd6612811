from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

Role = Literal["admin", "logger", "viewer"]


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=1, max_length=255)
    role: Role | None = None  # only honoured when an admin registers someone


class UserUpdate(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=255)
    role: Role | None = None


class UserResponse(BaseModel):
    id: UUID
    firebase_uid: str
    email: str
    display_name: str
    role: Role
    created_at: datetime
    last_active_at: datetime

    class Config:
        from_attributes = True
