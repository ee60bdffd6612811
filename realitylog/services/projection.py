"""Realtime projection of stored collections.

Every push is the complete collection ordered by the server-assigned
``created_at`` (newest first). Subscribers replace their cached array
wholesale; no diffs are ever sent.
"""

import asyncio
import json
import logging
from collections import defaultdict
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from realitylog.exceptions import ResourceNotFoundError
from realitylog.models.database import async_session_maker, store_transaction
from realitylog.models.action_category import ActionCategory
from realitylog.models.location import Location
from realitylog.models.log_entry import LogEntry
from realitylog.models.participant import Participant
from realitylog.models.tag import Tag
from realitylog.schemas.log_entry import LogEntryResponse
from realitylog.schemas.reference import (
    ActionCategoryResponse,
    LocationResponse,
    ParticipantResponse,
    TagResponse,
)
from realitylog.services.permissions import Identity, can_mutate_entry

logger = logging.getLogger(__name__)

# collection name -> (model, response schema)
COLLECTIONS: dict[str, tuple[type, type[BaseModel]]] = {
    "participants": (Participant, ParticipantResponse),
    "locations": (Location, LocationResponse),
    "action_categories": (ActionCategory, ActionCategoryResponse),
    "tags": (Tag, TagResponse),
    "log_entries": (LogEntry, LogEntryResponse),
}


@dataclass(frozen=True)
class Snapshot:
    """A complete, ordered copy of one collection."""

    collection: str
    items: tuple[dict[str, Any], ...]
    published_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_sse(self) -> str:
        """Format snapshot for SSE transmission."""
        payload = {
            "collection": self.collection,
            "published_at": self.published_at,
            "items": list(self.items),
        }
        return f"event: snapshot\ndata: {json.dumps(payload)}\n\n"

    def for_identity(self, identity: Identity) -> "Snapshot":
        """Copy of the snapshot with ``can_edit`` set for one viewer.

        Only log entries carry ``can_edit``; other collections are returned as is.
        """
        if self.collection != "log_entries":
            return self
        items = tuple(
            {**item, "can_edit": can_mutate_entry(identity, UUID(item["created_by"]))}
            for item in self.items
        )
        return replace(self, items=items)


class SnapshotPublisher:
    """Per-collection fan-out of full snapshots to subscriber queues."""

    def __init__(self) -> None:
        # Map collection -> set of asyncio.Queue for each subscriber
        self._subscribers: dict[str, set[asyncio.Queue[Snapshot]]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def register(self, collection: str) -> asyncio.Queue[Snapshot]:
        # One slot: a newer snapshot supersedes any unread one
        queue: asyncio.Queue[Snapshot] = asyncio.Queue(maxsize=1)
        async with self._lock:
            self._subscribers[collection].add(queue)
            logger.info(
                f"New subscriber for {collection}. "
                f"Total: {len(self._subscribers[collection])}"
            )
        return queue

    async def unregister(self, collection: str, queue: asyncio.Queue[Snapshot]) -> None:
        async with self._lock:
            self._subscribers[collection].discard(queue)
            logger.info(
                f"Subscriber removed for {collection}. "
                f"Remaining: {len(self._subscribers[collection])}"
            )
            # Clean up empty subscriber sets
            if not self._subscribers[collection]:
                del self._subscribers[collection]

    async def publish(self, snapshot: Snapshot) -> int:
        """Hand a snapshot to every subscriber of its collection.

        Returns:
            Number of subscribers notified
        """
        async with self._lock:
            subscribers = self._subscribers.get(snapshot.collection, set()).copy()

        if not subscribers:
            logger.debug(f"No subscribers for {snapshot.collection}")
            return 0

        for queue in subscribers:
            if queue.full():
                stale = queue.get_nowait()
                logger.debug(f"Dropped stale {stale.collection} snapshot for slow subscriber")
            queue.put_nowait(snapshot)

        logger.info(
            f"Published {snapshot.collection} snapshot ({len(snapshot.items)} items) "
            f"to {len(subscribers)} subscribers"
        )
        return len(subscribers)

    def get_subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, set()))


class RealtimeProjection:
    """Loads ordered collection snapshots and pushes them to subscribers."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        publisher: SnapshotPublisher | None = None,
    ) -> None:
        self._session_maker = session_maker
        self.publisher = publisher or SnapshotPublisher()

    @staticmethod
    def validate_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ResourceNotFoundError(f"Unknown collection: {collection}")

    async def load(self, collection: str) -> Snapshot:
        self.validate_collection(collection)
        model, schema = COLLECTIONS[collection]
        async with store_transaction(self._session_maker) as db:
            result = await db.execute(select(model).order_by(model.created_at.desc()))
            rows = result.scalars().all()
        items = tuple(schema.model_validate(row).model_dump(mode="json") for row in rows)
        return Snapshot(collection=collection, items=items)

    async def refresh(self, collection: str) -> int:
        """Reload a collection after a write and push the new snapshot.

        Nothing is loaded while the collection has no subscribers.
        """
        if self.publisher.get_subscriber_count(collection) == 0:
            return 0
        snapshot = await self.load(collection)
        return await self.publisher.publish(snapshot)

    async def subscribe(self, collection: str) -> AsyncGenerator[Snapshot, None]:
        """Yield the current snapshot, then every replacement.

        Registration happens before the initial load so no push is missed.
        Each new subscription starts from a fresh full snapshot.
        """
        self.validate_collection(collection)
        queue = await self.publisher.register(collection)
        try:
            yield await self.load(collection)
            while True:
                yield await queue.get()
        except asyncio.CancelledError:
            logger.info(f"Subscriber cancelled for {collection}")
            raise
        finally:
            await self.publisher.unregister(collection, queue)


# Global projection instance
projection = RealtimeProjection(async_session_maker)
