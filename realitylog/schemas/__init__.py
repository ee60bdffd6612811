from realitylog.schemas.reference import (
    ActionCategoryResponse,
    LocationResponse,
    ParticipantResponse,
    TagResponse,
)
from realitylog.schemas.user import UserResponse

__all__ = [
    "UserResponse",
    "ParticipantResponse",
    "LocationResponse",
    "ActionCategoryResponse",
    "TagResponse",
]
