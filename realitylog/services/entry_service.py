"""Authorize-then-mutate operations on stored log entries."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from realitylog.exceptions import EmptyNotesError, EntryNotFoundError, LoggerError
from realitylog.models.log_entry import LogEntry
from realitylog.services.entry_store import EntryStore
from realitylog.services.permissions import (
    Identity,
    require_admin,
    require_entry_mutation,
)

logger = logging.getLogger(__name__)


@dataclass
class BulkDeleteResult:
    total: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


async def edit_entry_notes(
    store: EntryStore,
    identity: Identity,
    entry_id: UUID,
    new_notes: str,
) -> LogEntry:
    """Replace the notes of an entry.

    The permission check runs against the stored row inside the update
    transaction, never against a cached copy.

    Raises:
        EmptyNotesError: notes empty after trimming
        EntryNotFoundError: entry no longer exists
        PermissionDeniedError: requester may not change this entry
    """
    notes = (new_notes or "").strip()
    if not notes:
        raise EmptyNotesError()

    def guard(entry: LogEntry) -> None:
        require_entry_mutation(identity, entry.created_by)

    return await store.update_entry(
        entry_id,
        {"notes": notes, "updated_by": identity.id},
        guard=guard,
    )


async def delete_entry(store: EntryStore, identity: Identity, entry_id: UUID) -> None:
    """Delete one entry. Deleting an id that is already gone raises EntryNotFoundError."""

    def guard(entry: LogEntry) -> None:
        require_entry_mutation(identity, entry.created_by)

    await store.delete_entry(entry_id, guard=guard)


async def delete_all_entries(store: EntryStore, identity: Identity) -> BulkDeleteResult:
    """Delete every entry, one by one. Admin only.

    Not atomic: failures are counted and reported, and the remaining entries
    are still attempted.
    """
    require_admin(identity)

    entry_ids = await store.list_entry_ids()
    result = BulkDeleteResult(total=len(entry_ids))
    for entry_id in entry_ids:
        try:
            await store.delete_entry(entry_id, notify=False)
            result.deleted += 1
        except EntryNotFoundError:
            # Removed concurrently; nothing left to do for this id
            result.skipped += 1
        except LoggerError as e:
            result.failed += 1
            result.errors.append(f"{entry_id}: {e.message}")

    if result.failed:
        logger.warning(
            f"Bulk delete by {identity.id} incomplete: "
            f"{result.deleted}/{result.total} deleted, {result.failed} failed"
        )
    else:
        logger.info(f"Bulk delete by {identity.id}: {result.deleted} entries removed")

    await store.notify_changed()
    return result
