"""Firebase account management paired with local user profiles."""

import logging

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError, UnavailableError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realitylog.config import get_settings
from realitylog.exceptions import (
    ConflictError,
    ConnectivityError,
    InvalidFieldValueError,
    UnknownError,
    UserNotFoundError,
)
from realitylog.models.user import User

logger = logging.getLogger(__name__)

# Initialize Firebase Admin SDK
_firebase_app = None


def get_firebase_app() -> firebase_admin.App:
    global _firebase_app
    if _firebase_app is None:
        try:
            _firebase_app = firebase_admin.get_app()
        except ValueError:
            # App not initialized yet
            settings = get_settings()
            if settings.firebase_project_id:
                cred = credentials.ApplicationDefault()
                _firebase_app = firebase_admin.initialize_app(
                    cred, {"projectId": settings.firebase_project_id}
                )
            else:
                _firebase_app = firebase_admin.initialize_app()
    return _firebase_app


async def create_account(
    db: AsyncSession,
    email: str,
    password: str,
    display_name: str,
    role: str | None = None,
) -> User:
    """Create the Firebase account and its profile row."""
    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Email already registered: {email}")

    get_firebase_app()
    try:
        record = firebase_auth.create_user(
            email=email, password=password, display_name=display_name
        )
    except firebase_auth.EmailAlreadyExistsError as e:
        raise ConflictError(f"Email already registered: {email}") from e
    except UnavailableError as e:
        raise ConnectivityError(f"Identity provider unreachable: {e}") from e
    except ValueError as e:
        raise InvalidFieldValueError("email", str(e)) from e
    except FirebaseError as e:
        raise UnknownError(str(e)) from e

    user = User(
        firebase_uid=record.uid,
        email=email,
        display_name=display_name,
        role=role or get_settings().default_role,
    )
    db.add(user)
    try:
        await db.flush()
    except SQLAlchemyError:
        logger.warning(f"Profile write failed for {email}; removing Firebase account {record.uid}")
        try:
            firebase_auth.delete_user(record.uid)
        except FirebaseError as e:
            logger.error(f"Failed to remove orphaned Firebase account {record.uid}: {e}")
        raise
    logger.info(f"Registered {email} as {user.role}")
    return user


def revoke_sessions(user: User) -> None:
    """Sign the user out everywhere by revoking Firebase refresh tokens."""
    settings = get_settings()
    if settings.dev_mode and user.firebase_uid == settings.dev_user_id:
        logger.info("Dev user logout; nothing to revoke")
        return

    get_firebase_app()
    try:
        firebase_auth.revoke_refresh_tokens(user.firebase_uid)
    except UnavailableError as e:
        raise ConnectivityError(f"Identity provider unreachable: {e}") from e
    except (ValueError, FirebaseError) as e:
        raise UnknownError(str(e)) from e
    logger.info(f"Revoked refresh tokens for {user.email}")


async def get_user(db: AsyncSession, user_id) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(str(user_id))
    return user
