"""Logging sessions: the operator's selection, notes draft and live timecode.

A session belongs to the identity that opened it; only that identity may
drive it.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from uuid import UUID

from fastapi import APIRouter, Request, status
from fastapi.responses import StreamingResponse

from realitylog.api.deps import CurrentIdentity, Sessions
from realitylog.schemas.log_entry import LogEntryResponse
from realitylog.schemas.session import (
    NotesUpdate,
    SelectionState,
    SelectionValue,
    SessionResponse,
    TimecodeEdit,
    TimecodeState,
    ToggleResponse,
)
from realitylog.services.log_session import LoggingSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(session: LoggingSession) -> SessionResponse:
    snapshot = session.selection.snapshot()
    return SessionResponse(
        id=session.id,
        owner_id=session.owner.id,
        selection=SelectionState(
            participants=sorted(snapshot.participants, key=str),
            location=snapshot.location,
            action_category=snapshot.action_category,
            tags=sorted(snapshot.tags, key=str),
        ),
        notes=session.notes,
        timecode=TimecodeState(
            value=str(session.timecode.current),
            mode=session.timecode.mode,
            fps=session.timecode.fps,
        ),
        submitting=session.in_flight,
        created_at=session.created_at,
        last_activity_at=session.last_activity_at,
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def open_session(identity: CurrentIdentity, sessions: Sessions) -> SessionResponse:
    return _to_response(await sessions.open(identity))


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: UUID, identity: CurrentIdentity, sessions: Sessions
) -> SessionResponse:
    return _to_response(sessions.get(session_id, identity))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session(session_id: UUID, identity: CurrentIdentity, sessions: Sessions) -> None:
    await sessions.close(session_id, identity)


# =============================================================================
# Selection
# =============================================================================


@router.post("/{session_id}/participants/{participant_id}", response_model=ToggleResponse)
async def toggle_participant(
    session_id: UUID,
    participant_id: UUID,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> ToggleResponse:
    session = sessions.get(session_id, identity)
    selected = session.selection.toggle_participant(participant_id)
    return ToggleResponse(id=participant_id, selected=selected)


@router.post("/{session_id}/tags/{tag_id}", response_model=ToggleResponse)
async def toggle_tag(
    session_id: UUID,
    tag_id: UUID,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> ToggleResponse:
    session = sessions.get(session_id, identity)
    selected = session.selection.toggle_tag(tag_id)
    return ToggleResponse(id=tag_id, selected=selected)


@router.put("/{session_id}/location", response_model=SessionResponse)
async def set_location(
    session_id: UUID,
    request: SelectionValue,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> SessionResponse:
    session = sessions.get(session_id, identity)
    session.selection.set_location(request.id)
    return _to_response(session)


@router.put("/{session_id}/action-category", response_model=SessionResponse)
async def set_action_category(
    session_id: UUID,
    request: SelectionValue,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> SessionResponse:
    session = sessions.get(session_id, identity)
    session.selection.set_action_category(request.id)
    return _to_response(session)


@router.delete("/{session_id}/selection", response_model=SessionResponse)
async def clear_selection(
    session_id: UUID, identity: CurrentIdentity, sessions: Sessions
) -> SessionResponse:
    session = sessions.get(session_id, identity)
    session.selection.clear()
    return _to_response(session)


@router.put("/{session_id}/notes", response_model=SessionResponse)
async def set_notes(
    session_id: UUID,
    request: NotesUpdate,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> SessionResponse:
    session = sessions.get(session_id, identity)
    session.notes = request.notes
    return _to_response(session)


# =============================================================================
# Timecode
# =============================================================================


@router.put("/{session_id}/timecode", response_model=TimecodeState)
async def edit_timecode(
    session_id: UUID,
    request: TimecodeEdit,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> TimecodeState:
    """Pin the timecode. Invalid input is rejected and the clock is unchanged."""
    generator = sessions.get(session_id, identity).timecode
    value = generator.set_manual(request.value)
    return TimecodeState(value=str(value), mode=generator.mode, fps=generator.fps)


@router.post("/{session_id}/timecode/resync", response_model=TimecodeState)
async def resync_timecode(
    session_id: UUID, identity: CurrentIdentity, sessions: Sessions
) -> TimecodeState:
    generator = sessions.get(session_id, identity).timecode
    value = generator.resync()
    return TimecodeState(value=str(value), mode=generator.mode, fps=generator.fps)


@router.get("/{session_id}/timecode/stream")
async def stream_timecode(
    session_id: UUID,
    request: Request,
    identity: CurrentIdentity,
    sessions: Sessions,
) -> StreamingResponse:
    """Server-sent events carrying the formatted timecode on every tick."""
    session = sessions.get(session_id, identity)
    generator = session.timecode

    async def event_stream() -> AsyncGenerator[str, None]:
        try:
            async for value in generator.subscribe():
                if await request.is_disconnected():
                    break
                # A watched session is not idle
                session.touch()
                yield f"event: timecode\ndata: {value}\n\n"
        except asyncio.CancelledError:
            logger.info(f"Timecode stream for session {session_id} cancelled")
            raise

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# =============================================================================
# Submission
# =============================================================================


@router.post("/{session_id}/submit", response_model=LogEntryResponse, status_code=status.HTTP_201_CREATED)
async def submit(session_id: UUID, identity: CurrentIdentity, sessions: Sessions) -> LogEntryResponse:
    """Persist the pending entry. Notes are cleared only when the write succeeds."""
    session = sessions.get(session_id, identity)
    entry = await session.submit()
    response = LogEntryResponse.model_validate(entry)
    response.can_edit = True
    return response
