"""Log entry endpoints: query, direct submission, notes edits, deletion, export."""

import logging
import math
from datetime import datetime
from io import BytesIO
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from realitylog.api.deps import CurrentIdentity, Entries, References, SubmitterIdentity
from realitylog.config import get_settings
from realitylog.models.log_entry import LogEntry
from realitylog.schemas.log_entry import (
    BulkCreateResponse,
    BulkDeleteResponse,
    ExportFormat,
    LogEntryBulkCreate,
    LogEntryCreate,
    LogEntryListResponse,
    LogEntryResponse,
    LogEntryUpdate,
)
from realitylog.services import entry_service
from realitylog.services.entry_store import EntryQuery
from realitylog.services.export_service import export_entries
from realitylog.services.permissions import Identity, can_mutate_entry
from realitylog.services.reference_store import ReferenceStore
from realitylog.services.selection import SelectionSnapshot
from realitylog.services.submission import CandidateEntry, build_candidate

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter()


class EntryFilters:
    """Query-string filters shared by list and export."""

    def __init__(
        self,
        participant_id: UUID | None = None,
        location_id: UUID | None = None,
        action_category_id: UUID | None = None,
        tag_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        search: str | None = Query(None, max_length=200),
    ):
        self.participant_id = participant_id
        self.location_id = location_id
        self.action_category_id = action_category_id
        self.tag_id = tag_id
        self.start = start
        self.end = end
        self.search = search.strip() if search else None

    async def to_query(self, references: ReferenceStore) -> EntryQuery:
        names = await references.names("participants") if self.search else None
        return EntryQuery(
            participant_id=self.participant_id,
            location_id=self.location_id,
            action_category_id=self.action_category_id,
            tag_id=self.tag_id,
            start=self.start,
            end=self.end,
            search=self.search,
            participant_names=names,
        )


Filters = Annotated[EntryFilters, Depends()]


def _to_response(entry: LogEntry, identity: Identity) -> LogEntryResponse:
    response = LogEntryResponse.model_validate(entry)
    response.can_edit = can_mutate_entry(identity, entry.created_by)
    return response


def _candidate_from_request(request: LogEntryCreate) -> CandidateEntry:
    selection = SelectionSnapshot(
        participants=frozenset(request.participants),
        location=request.location_id,
        action_category=request.action_category_id,
        tags=frozenset(request.tags),
    )
    return build_candidate(selection, request.notes, request.timecode, request.timestamp)


@router.get("", response_model=LogEntryListResponse)
async def list_entries(
    identity: CurrentIdentity,
    store: Entries,
    references: References,
    filters: Filters,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=settings.entries_page_limit_max),
) -> LogEntryListResponse:
    """Newest first by server creation time."""
    entries = await store.list_entries(await filters.to_query(references))
    total = len(entries)
    offset = (page - 1) * limit
    return LogEntryListResponse(
        items=[_to_response(e, identity) for e in entries[offset : offset + limit]],
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/export")
async def export_log(
    identity: CurrentIdentity,
    store: Entries,
    references: References,
    filters: Filters,
    export_format: ExportFormat = Query("pdf", alias="format"),
) -> StreamingResponse:
    entries = await store.list_entries(await filters.to_query(references))
    lookup = await references.name_lookup()
    content, media_type, filename = export_entries(
        export_format, entries, lookup, notes_limit=settings.export_notes_preview_chars
    )
    logger.info(f"{identity.email} exported {len(entries)} entries as {export_format}")
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{entry_id}", response_model=LogEntryResponse)
async def get_entry(entry_id: UUID, identity: CurrentIdentity, store: Entries) -> LogEntryResponse:
    return _to_response(await store.get_entry(entry_id), identity)


@router.post("", response_model=LogEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    request: LogEntryCreate,
    identity: SubmitterIdentity,
    store: Entries,
) -> LogEntryResponse:
    """Submit a fully specified entry without a logging session."""
    candidate = _candidate_from_request(request)
    entry = await store.create_entry(candidate, created_by=identity.id)
    return _to_response(entry, identity)


@router.post("/bulk", response_model=BulkCreateResponse, status_code=status.HTTP_201_CREATED)
async def bulk_create_entries(
    request: LogEntryBulkCreate,
    identity: SubmitterIdentity,
    store: Entries,
) -> BulkCreateResponse:
    """Every entry is validated before any is written."""
    candidates = [_candidate_from_request(item) for item in request.entries]
    created = []
    for candidate in candidates:
        entry = await store.create_entry(candidate, created_by=identity.id)
        created.append(_to_response(entry, identity))
    logger.info(f"{identity.email} bulk created {len(created)} entries")
    return BulkCreateResponse(created=created)


@router.patch("/{entry_id}", response_model=LogEntryResponse)
async def update_entry_notes(
    entry_id: UUID,
    request: LogEntryUpdate,
    identity: CurrentIdentity,
    store: Entries,
) -> LogEntryResponse:
    entry = await entry_service.edit_entry_notes(store, identity, entry_id, request.notes)
    return _to_response(entry, identity)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: UUID, identity: CurrentIdentity, store: Entries) -> None:
    await entry_service.delete_entry(store, identity, entry_id)


@router.delete("", response_model=BulkDeleteResponse)
async def delete_all_entries(identity: CurrentIdentity, store: Entries) -> BulkDeleteResponse:
    """Delete every entry (admin only). Partial failures are reported, not rolled back."""
    result = await entry_service.delete_all_entries(store, identity)
    return BulkDeleteResponse(
        total=result.total,
        deleted=result.deleted,
        failed=result.failed,
        skipped=result.skipped,
        errors=result.errors,
    )
