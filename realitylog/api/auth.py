from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials

from realitylog.api.deps import CurrentUser, DbSession, _authenticate_user, security
from realitylog.config import get_settings
from realitylog.schemas.user import RegisterRequest, UserResponse
from realitylog.services.accounts import create_account, revoke_sessions
from realitylog.services.permissions import Identity, require_admin

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser) -> UserResponse:
    """Get current authenticated user info."""
    return UserResponse.model_validate(current_user)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: DbSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> UserResponse:
    """Create an account. Self sign-up always gets the default role.

    Assigning any other role requires an admin caller.
    """
    role = request.role
    if role is not None and role != get_settings().default_role:
        caller = await _authenticate_user(db, credentials)
        require_admin(Identity.from_user(caller))

    user = await create_account(
        db,
        email=request.email,
        password=request.password,
        display_name=request.display_name,
        role=role,
    )
    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: CurrentUser) -> None:
    """Revoke the caller's refresh tokens."""
    revoke_sessions(current_user)
