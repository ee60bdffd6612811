from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class SelectionState(BaseModel):
    participants: list[UUID]
    location: UUID | None
    action_category: UUID | None
    tags: list[UUID]


class TimecodeState(BaseModel):
    value: str
    mode: Literal["synced", "manual"]
    fps: int


class SessionResponse(BaseModel):
    id: UUID
    owner_id: UUID
    selection: SelectionState
    notes: str
    timecode: TimecodeState
    submitting: bool
    created_at: datetime
    last_activity_at: datetime


class SelectionValue(BaseModel):
    """Set (or with ``null`` clear) a single-choice selection."""

    id: UUID | None = None

    class Config:
        extra = "forbid"


class ToggleResponse(BaseModel):
    id: UUID
    selected: bool


class NotesUpdate(BaseModel):
    notes: str = Field(..., max_length=10000)

    class Config:
        extra = "forbid"


class TimecodeEdit(BaseModel):
    value: str

    class Config:
        extra = "forbid"
