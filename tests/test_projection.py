"""Tests for the realtime projection.

Features:
- Per-collection subscriber management
- Full ordered snapshots on every change
- Latest-wins delivery to slow subscribers
"""

import asyncio
import json
import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from realitylog.exceptions import ResourceNotFoundError
from realitylog.services.entry_store import EntryStore
from realitylog.services.projection import RealtimeProjection, Snapshot, SnapshotPublisher
from realitylog.services.reference_store import ReferenceStore
from realitylog.services.submission import CandidateEntry


def _candidate(notes: str) -> CandidateEntry:
    return CandidateEntry(
        participants=(),
        location_id=uuid.uuid4(),
        action_category_id=uuid.uuid4(),
        tags=(),
        notes=notes,
        timecode="08:00:00:00",
        timestamp=datetime.now(timezone.utc),
    )


class TestSnapshotPublisher:
    """Tests for the snapshot fan-out."""

    @pytest.fixture
    def publisher(self):
        return SnapshotPublisher()

    @pytest.mark.asyncio
    async def test_register_and_unregister(self, publisher):
        queue = await publisher.register("tags")
        assert publisher.get_subscriber_count("tags") == 1

        await publisher.unregister("tags", queue)
        assert publisher.get_subscriber_count("tags") == 0

    @pytest.mark.asyncio
    async def test_publish_reaches_only_that_collection(self, publisher):
        tags_queue = await publisher.register("tags")
        locations_queue = await publisher.register("locations")

        delivered = await publisher.publish(Snapshot(collection="tags", items=({"id": "1"},)))

        assert delivered == 1
        assert (await tags_queue.get()).items == ({"id": "1"},)
        assert locations_queue.empty()

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self, publisher):
        assert await publisher.publish(Snapshot(collection="tags", items=())) == 0

    @pytest.mark.asyncio
    async def test_slow_subscriber_keeps_only_newest(self, publisher):
        queue = await publisher.register("tags")

        await publisher.publish(Snapshot(collection="tags", items=({"id": "old"},)))
        await publisher.publish(Snapshot(collection="tags", items=({"id": "new"},)))

        assert queue.qsize() == 1
        assert (await queue.get()).items == ({"id": "new"},)

    def test_snapshot_sse_format(self):
        snapshot = Snapshot(collection="tags", items=({"id": "1", "name": "drama"},))

        message = snapshot.to_sse()

        assert message.startswith("event: snapshot\ndata: ")
        assert message.endswith("\n\n")
        payload = json.loads(message.split("data: ", 1)[1])
        assert payload["collection"] == "tags"
        assert payload["items"] == [{"id": "1", "name": "drama"}]


class TestRealtimeProjection:
    @pytest.mark.asyncio
    async def test_unknown_collection(self, session_maker):
        projection = RealtimeProjection(session_maker)

        with pytest.raises(ResourceNotFoundError):
            projection.validate_collection("secrets")

    @pytest.mark.asyncio
    async def test_subscriber_receives_full_ordered_snapshots(self, session_maker, logger_identity):
        projection = RealtimeProjection(session_maker)
        store = EntryStore(session_maker, projection)
        stream = projection.subscribe("log_entries")

        initial = await stream.__anext__()
        assert initial.items == ()

        first = await store.create_entry(_candidate("first"), created_by=logger_identity.id)
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert [item["id"] for item in snapshot.items] == [str(first.id)]

        second = await store.create_entry(_candidate("second"), created_by=logger_identity.id)
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert [item["id"] for item in snapshot.items] == [str(second.id), str(first.id)]

        await stream.aclose()
        assert projection.publisher.get_subscriber_count("log_entries") == 0

    @pytest.mark.asyncio
    async def test_resubscribe_starts_from_fresh_snapshot(self, session_maker, logger_identity):
        projection = RealtimeProjection(session_maker)
        store = EntryStore(session_maker, projection)
        entry = await store.create_entry(_candidate("before"), created_by=logger_identity.id)

        stream = projection.subscribe("log_entries")
        snapshot = await stream.__anext__()
        await stream.aclose()

        assert [item["id"] for item in snapshot.items] == [str(entry.id)]

    @pytest.mark.asyncio
    async def test_reference_changes_are_published(self, session_maker):
        projection = RealtimeProjection(session_maker)
        references = ReferenceStore(session_maker, projection)
        stream = projection.subscribe("locations")
        assert (await stream.__anext__()).items == ()

        kitchen = await references.create("locations", {"name": "Kitchen"})
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert snapshot.items[0]["name"] == "Kitchen"

        await references.delete("locations", kitchen.id)
        snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
        assert snapshot.items == ()

        await stream.aclose()

    @pytest.mark.asyncio
    async def test_writes_without_subscribers_skip_reload(self, session_maker, logger_identity):
        projection = RealtimeProjection(session_maker)
        store = EntryStore(session_maker, projection)
        references = ReferenceStore(session_maker, projection)

        with patch.object(projection, "load", wraps=projection.load) as load:
            for i in range(5):
                await store.create_entry(_candidate(f"entry {i}"), created_by=logger_identity.id)
            await references.create("tags", {"name": "Drama"})

            assert load.await_count == 0

            stream = projection.subscribe("log_entries")
            await stream.__anext__()
            await store.create_entry(_candidate("watched"), created_by=logger_identity.id)
            snapshot = await asyncio.wait_for(stream.__anext__(), timeout=1)
            await stream.aclose()

        assert load.await_count == 2
        assert len(snapshot.items) == 6


class TestSnapshotForIdentity:
    @pytest.mark.asyncio
    async def test_can_edit_follows_subscriber_role(
        self, session_maker, logger_identity, viewer, admin
    ):
        projection = RealtimeProjection(session_maker)
        store = EntryStore(session_maker, projection)
        mine = await store.create_entry(_candidate("viewer's own"), created_by=viewer.id)
        theirs = await store.create_entry(_candidate("logger's"), created_by=logger_identity.id)

        snapshot = await projection.load("log_entries")

        def editable(identity):
            return {item["id"]: item["can_edit"] for item in snapshot.for_identity(identity).items}

        assert editable(admin) == {str(mine.id): True, str(theirs.id): True}
        assert editable(logger_identity) == {str(mine.id): True, str(theirs.id): True}
        assert editable(viewer) == {str(mine.id): True, str(theirs.id): False}

    def test_reference_snapshots_are_unchanged(self, viewer):
        snapshot = Snapshot(collection="tags", items=({"id": "t1", "name": "Drama"},))

        assert snapshot.for_identity(viewer) is snapshot
