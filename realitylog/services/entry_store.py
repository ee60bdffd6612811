"""Log entry persistence.

Each call runs in its own short-lived transaction so long-lived logging
sessions never hold a DB connection. Database failures surface as
``ConnectivityError`` (retryable) or ``UnknownError``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from realitylog.exceptions import EntryNotFoundError, InvalidFieldValueError, LoggerError
from realitylog.models.database import async_session_maker, store_transaction
from realitylog.models.log_entry import LogEntry
from realitylog.services.projection import RealtimeProjection, projection
from realitylog.services.submission import CandidateEntry

logger = logging.getLogger(__name__)

COLLECTION = "log_entries"

# Fields an update may touch; updated_at is always stamped here
EDITABLE_FIELDS = frozenset({"notes", "updated_by"})

EntryGuard = Callable[[LogEntry], None]


@dataclass
class EntryQuery:
    participant_id: UUID | None = None
    location_id: UUID | None = None
    action_category_id: UUID | None = None
    tag_id: UUID | None = None
    start: datetime | None = None
    end: datetime | None = None
    search: str | None = None
    participant_names: dict[str, str] | None = None


class EntryStore:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
        projection: RealtimeProjection | None = None,
    ) -> None:
        self._session_maker = session_maker
        self._projection = projection

    async def _notify(self) -> None:
        if self._projection is None:
            return
        try:
            await self._projection.refresh(COLLECTION)
        except LoggerError as e:
            # The write already committed; subscribers catch up on the next push
            logger.warning(f"Failed to push {COLLECTION} snapshot: {e.message}")

    async def create_entry(self, candidate: CandidateEntry, created_by: UUID) -> LogEntry:
        """Persist a candidate. The store assigns id, created_by and created_at."""
        async with store_transaction(self._session_maker) as db:
            entry = LogEntry(
                timestamp=candidate.timestamp,
                timecode=candidate.timecode,
                participants=[str(p) for p in candidate.participants],
                location_id=candidate.location_id,
                action_category_id=candidate.action_category_id,
                tags=[str(t) for t in candidate.tags],
                notes=candidate.notes,
                created_by=created_by,
                created_at=datetime.now(timezone.utc),
            )
            db.add(entry)
            await db.flush()
        logger.info(f"Created log entry {entry.id} at {entry.timecode} by {created_by}")
        await self._notify()
        return entry

    async def get_entry(self, entry_id: UUID) -> LogEntry:
        async with store_transaction(self._session_maker) as db:
            entry = await db.get(LogEntry, entry_id)
        if entry is None:
            raise EntryNotFoundError(str(entry_id))
        return entry

    async def update_entry(
        self,
        entry_id: UUID,
        fields: dict[str, Any],
        *,
        guard: EntryGuard | None = None,
    ) -> LogEntry:
        """Apply a partial update limited to the editable fields.

        ``guard`` sees the row as locked inside the same transaction and may
        raise to abort the write.
        """
        illegal = set(fields) - EDITABLE_FIELDS
        if illegal:
            raise InvalidFieldValueError(
                ", ".join(sorted(illegal)), "field cannot be changed after creation"
            )

        async with store_transaction(self._session_maker) as db:
            entry = await self._locked(db, entry_id)
            if guard is not None:
                guard(entry)
            for name, value in fields.items():
                setattr(entry, name, value)
            entry.updated_at = datetime.now(timezone.utc)
        logger.info(f"Updated log entry {entry_id} ({', '.join(sorted(fields))})")
        await self._notify()
        return entry

    async def delete_entry(
        self,
        entry_id: UUID,
        *,
        guard: EntryGuard | None = None,
        notify: bool = True,
    ) -> None:
        """Delete one entry. A missing id is an error, never a silent success."""
        async with store_transaction(self._session_maker) as db:
            entry = await self._locked(db, entry_id)
            if guard is not None:
                guard(entry)
            await db.delete(entry)
        logger.info(f"Deleted log entry {entry_id}")
        if notify:
            await self._notify()

    async def list_entry_ids(self) -> list[UUID]:
        async with store_transaction(self._session_maker) as db:
            result = await db.execute(select(LogEntry.id).order_by(LogEntry.created_at.desc()))
            return [row[0] for row in result.all()]

    async def list_entries(self, query: EntryQuery | None = None) -> list[LogEntry]:
        """Entries newest first (server created_at), filtered by ``query``."""
        query = query or EntryQuery()
        stmt = select(LogEntry).order_by(LogEntry.created_at.desc())
        if query.location_id is not None:
            stmt = stmt.where(LogEntry.location_id == query.location_id)
        if query.action_category_id is not None:
            stmt = stmt.where(LogEntry.action_category_id == query.action_category_id)
        if query.start is not None:
            stmt = stmt.where(LogEntry.timestamp >= query.start)
        if query.end is not None:
            stmt = stmt.where(LogEntry.timestamp <= query.end)

        async with store_transaction(self._session_maker) as db:
            result = await db.execute(stmt)
            entries = list(result.scalars().all())

        # JSON list membership and name search are evaluated here for portability
        if query.participant_id is not None:
            wanted = str(query.participant_id)
            entries = [e for e in entries if wanted in e.participants]
        if query.tag_id is not None:
            wanted = str(query.tag_id)
            entries = [e for e in entries if wanted in e.tags]
        if query.search:
            entries = [e for e in entries if _matches_search(e, query.search, query.participant_names)]
        return entries

    async def notify_changed(self) -> None:
        await self._notify()

    @staticmethod
    async def _locked(db: AsyncSession, entry_id: UUID) -> LogEntry:
        result = await db.execute(
            select(LogEntry).where(LogEntry.id == entry_id).with_for_update()
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(str(entry_id))
        return entry


def _matches_search(entry: LogEntry, term: str, participant_names: dict[str, str] | None) -> bool:
    needle = term.lower()
    if needle in entry.notes.lower():
        return True
    names = participant_names or {}
    return any(needle in names.get(pid, "").lower() for pid in entry.participants)


# Global entry store instance
entry_store = EntryStore(async_session_maker, projection)
