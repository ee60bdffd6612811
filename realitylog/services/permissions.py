"""Role rules for submitting, editing and deleting log entries.

These checks run in the service layer of this backend, against the entry
as currently stored, before any write is issued.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from realitylog.exceptions import PermissionDeniedError

ADMIN = "admin"
LOGGER = "logger"
VIEWER = "viewer"


@dataclass(frozen=True)
class Identity:
    """Authenticated requester. Does not hold a DB connection."""

    id: UUID
    email: str
    display_name: str
    role: str
    created_at: datetime | None = None
    last_active_at: datetime | None = None

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            created_at=user.created_at,
            last_active_at=user.last_active_at,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def can_submit(identity: Identity) -> bool:
    return identity.role in (ADMIN, LOGGER)


def can_mutate_entry(identity: Identity, created_by: UUID) -> bool:
    """Admins and loggers may change any entry; anyone may change their own."""
    return identity.role in (ADMIN, LOGGER) or created_by == identity.id


def require_submit(identity: Identity) -> None:
    if not can_submit(identity):
        raise PermissionDeniedError("Only loggers and admins can submit log entries")


def require_entry_mutation(identity: Identity, created_by: UUID) -> None:
    if not can_mutate_entry(identity, created_by):
        raise PermissionDeniedError("You can only change log entries you created")


def require_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise PermissionDeniedError("Admin access required")
