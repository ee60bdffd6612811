from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from realitylog.config import get_settings
from realitylog.exceptions import InvalidTimecodeError
from realitylog.services.timecode import Timecode


class LogEntryCreate(BaseModel):
    """Direct submission payload. The id is always assigned by the data store."""

    timecode: str
    timestamp: datetime | None = None
    participants: list[UUID] = Field(default_factory=list)
    location_id: UUID | None = None
    action_category_id: UUID | None = None
    tags: list[UUID] = Field(default_factory=list)
    notes: str = Field("", max_length=10000)

    class Config:
        extra = "forbid"

    @field_validator("timecode")
    @classmethod
    def validate_timecode(cls, v: str) -> str:
        try:
            return str(Timecode.parse(v, get_settings().timecode_fps))
        except InvalidTimecodeError as e:
            raise ValueError(e.message) from e


class LogEntryBulkCreate(BaseModel):
    entries: list[LogEntryCreate] = Field(..., min_length=1, max_length=500)


class LogEntryUpdate(BaseModel):
    """Only the notes of a stored entry can change."""

    notes: str = Field(..., max_length=10000)

    class Config:
        extra = "forbid"


class LogEntryResponse(BaseModel):
    id: UUID
    timestamp: datetime
    timecode: str
    participants: list[str]
    location_id: UUID
    action_category_id: UUID
    tags: list[str]
    notes: str
    created_by: UUID
    created_at: datetime
    updated_at: datetime | None = None
    updated_by: UUID | None = None
    can_edit: bool = False

    class Config:
        from_attributes = True


class LogEntryListResponse(BaseModel):
    items: list[LogEntryResponse]
    page: int
    limit: int
    total: int
    total_pages: int


class BulkCreateResponse(BaseModel):
    created: list[LogEntryResponse]


class BulkDeleteResponse(BaseModel):
    total: int
    deleted: int
    failed: int
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


ExportFormat = Literal["pdf", "csv", "json"]
