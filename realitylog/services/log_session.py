"""Operator logging session and the entry submission protocol.

A session owns one Selection, one notes draft and one TimecodeGenerator.
Submitting reads the timecode once, snapshots the selection, persists the
record and then clears only the notes. On failure the notes are kept so
the operator can retry without retyping.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID, uuid4

from realitylog.exceptions import SubmissionInFlightError
from realitylog.models.log_entry import LogEntry
from realitylog.services.entry_store import EntryStore
from realitylog.services.permissions import Identity, require_submit
from realitylog.services.selection import Selection
from realitylog.services.submission import CandidateEntry, build_candidate
from realitylog.services.timecode import TimecodeGenerator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoggingSession:
    def __init__(
        self,
        owner: Identity,
        store: EntryStore,
        timecode: TimecodeGenerator | None = None,
        session_id: UUID | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.id = session_id or uuid4()
        self.owner = owner
        self.selection = Selection()
        self.notes = ""
        self.timecode = timecode or TimecodeGenerator()
        self._store = store
        self._now = now
        self._in_flight = False
        self.created_at = now()
        self.last_activity_at = self.created_at

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def touch(self) -> None:
        self.last_activity_at = self._now()

    def build_candidate(self) -> CandidateEntry:
        """Validate and capture the pending entry without persisting it."""
        return build_candidate(
            self.selection.snapshot(),
            self.notes,
            self.timecode.current,
            timestamp=self._now(),
        )

    async def submit(self) -> LogEntry:
        """Persist the pending entry.

        Raises:
            PermissionDeniedError: owner is a viewer
            SubmissionInFlightError: a previous submit has not settled
            ValidationError: missing location/action or empty notes
            ConnectivityError, UnknownError: the write failed; notes are kept
        """
        require_submit(self.owner)
        if self._in_flight:
            raise SubmissionInFlightError()

        candidate = self.build_candidate()
        self.touch()

        self._in_flight = True
        try:
            entry = await self._store.create_entry(candidate, created_by=self.owner.id)
        finally:
            self._in_flight = False

        # Selection is left as is for the next entry under the same context
        self.notes = ""
        logger.info(f"Session {self.id} submitted entry {entry.id}")
        return entry

    async def close(self) -> None:
        await self.timecode.stop()
