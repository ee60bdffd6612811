"""Building a log entry candidate from the operator's current context."""

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from realitylog.exceptions import EmptyNotesError, MissingSelectionError
from realitylog.services.selection import SelectionSnapshot
from realitylog.services.timecode import Timecode


@dataclass(frozen=True)
class CandidateEntry:
    """Validated, immutable record ready to be handed to the data store."""

    participants: tuple[UUID, ...]
    location_id: UUID
    action_category_id: UUID
    tags: tuple[UUID, ...]
    notes: str
    timecode: str
    timestamp: datetime


def build_candidate(
    selection: SelectionSnapshot,
    notes: str,
    timecode: Timecode | str,
    timestamp: datetime | None = None,
) -> CandidateEntry:
    """Validate the pending entry and capture it by value.

    Raises:
        MissingSelectionError: location and/or action category not selected
        EmptyNotesError: notes empty after trimming
    """
    trimmed = (notes or "").strip()

    missing = []
    if selection.location is None:
        missing.append("location")
    if selection.action_category is None:
        missing.append("action_category")
    if missing:
        if not trimmed:
            missing.append("notes")
        raise MissingSelectionError(missing)
    if not trimmed:
        raise EmptyNotesError()

    return CandidateEntry(
        participants=tuple(sorted(selection.participants, key=str)),
        location_id=selection.location,
        action_category_id=selection.action_category,
        tags=tuple(sorted(selection.tags, key=str)),
        notes=trimmed,
        timecode=str(timecode),
        timestamp=timestamp or datetime.now(timezone.utc),
    )
