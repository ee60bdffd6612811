"""Schemas for the reference collections an admin curates.

Create payloads never carry an ``id``: identifiers are assigned by the
data store.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class ParticipantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    profile_picture_url: str | None = Field(None, max_length=2048)
    bio: str | None = None
    is_active: bool = True

    class Config:
        extra = "forbid"


class ParticipantUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    profile_picture_url: str | None = Field(None, max_length=2048)
    bio: str | None = None
    is_active: bool | None = None

    class Config:
        extra = "forbid"


class ParticipantResponse(BaseModel):
    id: UUID
    name: str
    profile_picture_url: str | None
    bio: str | None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    color: str = Field("#3B82F6", pattern=HEX_COLOR)

    class Config:
        extra = "forbid"


class LocationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    color: str | None = Field(None, pattern=HEX_COLOR)

    class Config:
        extra = "forbid"


class LocationResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    color: str
    created_at: datetime

    class Config:
        from_attributes = True


class ActionCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    color: str = Field("#10B981", pattern=HEX_COLOR)
    icon: str | None = Field(None, max_length=64)

    class Config:
        extra = "forbid"


class ActionCategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    color: str | None = Field(None, pattern=HEX_COLOR)
    icon: str | None = Field(None, max_length=64)

    class Config:
        extra = "forbid"


class ActionCategoryResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    color: str
    icon: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    color: str = Field("#F59E0B", pattern=HEX_COLOR)
    category: str | None = Field(None, max_length=100)

    class Config:
        extra = "forbid"


class TagUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    color: str | None = Field(None, pattern=HEX_COLOR)
    category: str | None = Field(None, max_length=100)

    class Config:
        extra = "forbid"


class TagResponse(BaseModel):
    id: UUID
    name: str
    color: str
    category: str | None
    created_at: datetime

    class Config:
        from_attributes = True
