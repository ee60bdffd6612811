"""CRUD for the admin-curated reference collections.

Deleting a participant, location, action category or tag leaves existing
log entries untouched; their references simply stop resolving.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from realitylog.exceptions import LoggerError, ReferenceNotFoundError
from realitylog.models.action_category import ActionCategory
from realitylog.models.database import async_session_maker, store_transaction
from realitylog.models.location import Location
from realitylog.models.participant import Participant
from realitylog.models.tag import Tag
from realitylog.services.export_service import NameLookup
from realitylog.services.projection import RealtimeProjection, projection

logger = logging.getLogger(__name__)

# collection name -> (model, human readable kind)
REFERENCE_MODELS: dict[str, tuple[type, str]] = {
    "participants": (Participant, "Participant"),
    "locations": (Location, "Location"),
    "action_categories": (ActionCategory, "Action category"),
    "tags": (Tag, "Tag"),
}


class ReferenceStore:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
        projection: RealtimeProjection | None = None,
    ) -> None:
        self._session_maker = session_maker
        self._projection = projection

    async def _notify(self, collection: str) -> None:
        if self._projection is None:
            return
        try:
            await self._projection.refresh(collection)
        except LoggerError as e:
            logger.warning(f"Failed to push {collection} snapshot: {e.message}")

    async def list_records(self, collection: str) -> list[Any]:
        model, _ = REFERENCE_MODELS[collection]
        async with store_transaction(self._session_maker) as db:
            result = await db.execute(select(model).order_by(model.created_at.desc()))
            return list(result.scalars().all())

    async def get(self, collection: str, record_id: UUID) -> Any:
        model, kind = REFERENCE_MODELS[collection]
        async with store_transaction(self._session_maker) as db:
            record = await db.get(model, record_id)
        if record is None:
            raise ReferenceNotFoundError(kind, str(record_id))
        return record

    async def create(self, collection: str, data: dict[str, Any]) -> Any:
        model, kind = REFERENCE_MODELS[collection]
        async with store_transaction(self._session_maker) as db:
            record = model(**data)
            db.add(record)
            await db.flush()
        logger.info(f"Created {kind.lower()} {record.id}")
        await self._notify(collection)
        return record

    async def update(self, collection: str, record_id: UUID, data: dict[str, Any]) -> Any:
        model, kind = REFERENCE_MODELS[collection]
        async with store_transaction(self._session_maker) as db:
            record = await db.get(model, record_id)
            if record is None:
                raise ReferenceNotFoundError(kind, str(record_id))
            for name, value in data.items():
                setattr(record, name, value)
            await db.flush()
        logger.info(f"Updated {kind.lower()} {record_id} ({', '.join(sorted(data))})")
        await self._notify(collection)
        return record

    async def delete(self, collection: str, record_id: UUID) -> None:
        model, kind = REFERENCE_MODELS[collection]
        async with store_transaction(self._session_maker) as db:
            record = await db.get(model, record_id)
            if record is None:
                raise ReferenceNotFoundError(kind, str(record_id))
            await db.delete(record)
        logger.info(f"Deleted {kind.lower()} {record_id}")
        await self._notify(collection)

    async def names(self, collection: str) -> dict[str, str]:
        """Map of id -> name, used to resolve references for display."""
        return {str(record.id): record.name for record in await self.list_records(collection)}

    async def name_lookup(self) -> NameLookup:
        return NameLookup(
            participants=await self.names("participants"),
            locations=await self.names("locations"),
            action_categories=await self.names("action_categories"),
            tags=await self.names("tags"),
        )


# Global reference store instance
reference_store = ReferenceStore(async_session_maker, projection)
