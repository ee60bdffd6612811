import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from realitylog.models.base import Base, UUIDMixin, utcnow


class LogEntry(Base, UUIDMixin):
    """A submitted observation.

    Only ``notes``, ``updated_at`` and ``updated_by`` change after creation.
    References to participants, location, action category and tags are plain
    ids with no foreign keys: a reference deleted later simply stops resolving.
    """

    __tablename__ = "log_entries"

    # Client-side instant at submission; display only, never used for ordering
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timecode: Mapped[str] = mapped_column(String(11), nullable=False)

    participants: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    location_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    action_category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), nullable=False, index=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str] = mapped_column(Text, nullable=False)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)

    def __repr__(self) -> str:
        return f"<LogEntry {self.id} {self.timecode}>"
