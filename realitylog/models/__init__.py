from realitylog.models.action_category import ActionCategory
from realitylog.models.base import Base
from realitylog.models.location import Location
from realitylog.models.log_entry import LogEntry
from realitylog.models.participant import Participant
from realitylog.models.tag import Tag
from realitylog.models.user import User

__all__ = [
    "Base",
    "User",
    "Participant",
    "Location",
    "ActionCategory",
    "Tag",
    "LogEntry",
]
