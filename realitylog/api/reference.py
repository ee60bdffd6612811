"""Reference collections: participants, locations, action categories, tags.

Any signed-in user may read; only admins may write.
"""

from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel

from realitylog.api.deps import AdminIdentity, CurrentIdentity, References
from realitylog.schemas.reference import (
    ActionCategoryCreate,
    ActionCategoryResponse,
    ActionCategoryUpdate,
    LocationCreate,
    LocationResponse,
    LocationUpdate,
    ParticipantCreate,
    ParticipantResponse,
    ParticipantUpdate,
    TagCreate,
    TagResponse,
    TagUpdate,
)

# Explicit nulls for these are ignored rather than stored
NON_NULLABLE = frozenset({"name", "color", "is_active"})


def build_router(
    collection: str,
    create_schema: type[BaseModel],
    update_schema: type[BaseModel],
    response_schema: type[BaseModel],
) -> APIRouter:
    router = APIRouter()

    @router.get("", response_model=list[response_schema])
    async def list_records(identity: CurrentIdentity, store: References):
        records = await store.list_records(collection)
        return [response_schema.model_validate(r) for r in records]

    @router.get("/{record_id}", response_model=response_schema)
    async def get_record(record_id: UUID, identity: CurrentIdentity, store: References):
        return response_schema.model_validate(await store.get(collection, record_id))

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED)
    async def create_record(
        request: create_schema,  # type: ignore[valid-type]
        admin: AdminIdentity,
        store: References,
    ):
        record = await store.create(collection, request.model_dump())
        return response_schema.model_validate(record)

    @router.patch("/{record_id}", response_model=response_schema)
    async def update_record(
        record_id: UUID,
        request: update_schema,  # type: ignore[valid-type]
        admin: AdminIdentity,
        store: References,
    ):
        changes = {
            name: value
            for name, value in request.model_dump(exclude_unset=True).items()
            if value is not None or name not in NON_NULLABLE
        }
        record = await store.update(collection, record_id, changes)
        return response_schema.model_validate(record)

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_record(record_id: UUID, admin: AdminIdentity, store: References) -> None:
        await store.delete(collection, record_id)

    return router


participants = build_router(
    "participants", ParticipantCreate, ParticipantUpdate, ParticipantResponse
)
locations = build_router("locations", LocationCreate, LocationUpdate, LocationResponse)
action_categories = build_router(
    "action_categories", ActionCategoryCreate, ActionCategoryUpdate, ActionCategoryResponse
)
tags = build_router("tags", TagCreate, TagUpdate, TagResponse)
