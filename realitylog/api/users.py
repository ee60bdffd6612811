"""User administration (admin only)."""

import logging
from uuid import UUID

from fastapi import APIRouter, status
from sqlalchemy import select

from realitylog.api.deps import AdminIdentity, DbSession
from realitylog.models.user import User
from realitylog.schemas.user import RegisterRequest, UserResponse, UserUpdate
from realitylog.services.accounts import create_account, get_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[UserResponse])
async def list_users(admin: AdminIdentity, db: DbSession) -> list[UserResponse]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: RegisterRequest,
    admin: AdminIdentity,
    db: DbSession,
) -> UserResponse:
    user = await create_account(
        db,
        email=request.email,
        password=request.password,
        display_name=request.display_name,
        role=request.role,
    )
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    request: UserUpdate,
    admin: AdminIdentity,
    db: DbSession,
) -> UserResponse:
    user = await get_user(db, user_id)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    for name, value in changes.items():
        setattr(user, name, value)
    await db.flush()
    await db.refresh(user)
    logger.info(f"Admin {admin.email} updated user {user_id} ({', '.join(sorted(changes))})")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, admin: AdminIdentity, db: DbSession) -> None:
    """Remove the profile. Entries the user created are kept."""
    user = await get_user(db, user_id)
    await db.delete(user)
    await db.flush()
    logger.info(f"Admin {admin.email} deleted user {user_id}")
