"""Operator selection state: participants, location, action category, tags.

The selection survives submissions. Nothing here validates that an id
refers to an existing record.
"""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class SelectionSnapshot:
    participants: frozenset[UUID] = frozenset()
    location: UUID | None = None
    action_category: UUID | None = None
    tags: frozenset[UUID] = frozenset()


@dataclass
class Selection:
    participants: set[UUID] = field(default_factory=set)
    location: UUID | None = None
    action_category: UUID | None = None
    tags: set[UUID] = field(default_factory=set)

    def toggle_participant(self, participant_id: UUID) -> bool:
        """Add or remove a participant. Returns True if now selected."""
        return _toggle(self.participants, participant_id)

    def toggle_tag(self, tag_id: UUID) -> bool:
        """Add or remove a tag. Returns True if now selected."""
        return _toggle(self.tags, tag_id)

    def set_location(self, location_id: UUID | None) -> None:
        self.location = location_id

    def set_action_category(self, action_category_id: UUID | None) -> None:
        self.action_category = action_category_id

    def clear(self) -> None:
        self.participants.clear()
        self.tags.clear()
        self.location = None
        self.action_category = None

    def snapshot(self) -> SelectionSnapshot:
        return SelectionSnapshot(
            participants=frozenset(self.participants),
            location=self.location,
            action_category=self.action_category,
            tags=frozenset(self.tags),
        )


def _toggle(members: set[UUID], member: UUID) -> bool:
    if member in members:
        members.discard(member)
        return False
    members.add(member)
    return True
