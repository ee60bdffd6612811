"""Server-sent event streams of complete collection snapshots."""

import asyncio
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from realitylog.api.deps import CurrentIdentity, Projection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{collection}")
async def stream_collection(
    collection: str,
    request: Request,
    identity: CurrentIdentity,
    projection: Projection,
) -> StreamingResponse:
    """Stream the current snapshot, then every replacement.

    Clients replace their cached array with each snapshot. Reconnecting
    always starts with a fresh full snapshot. Log entries carry ``can_edit``
    computed for the subscribing identity.
    """
    projection.validate_collection(collection)
    logger.info(f"{identity.email} subscribed to {collection}")

    async def event_stream() -> AsyncGenerator[str, None]:
        try:
            async for snapshot in projection.subscribe(collection):
                if await request.is_disconnected():
                    break
                yield snapshot.for_identity(identity).to_sse()
        except asyncio.CancelledError:
            logger.info(f"Realtime stream for {collection} cancelled")
            raise

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
