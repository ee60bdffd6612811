import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin.exceptions import FirebaseError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realitylog.config import get_settings
from realitylog.exceptions import AuthenticationError, ConnectivityError
from realitylog.models.base import utcnow
from realitylog.models.database import async_session_maker, get_db
from realitylog.models.user import User
from realitylog.services.accounts import get_firebase_app
from realitylog.services.entry_store import EntryStore, entry_store
from realitylog.services.permissions import Identity, require_admin, require_submit
from realitylog.services.projection import RealtimeProjection, projection
from realitylog.services.reference_store import ReferenceStore, reference_store
from realitylog.services.session_manager import SessionManager, session_manager

settings = get_settings()
logger = logging.getLogger(__name__)

# Use auto_error=False to allow dev token bypass
security = HTTPBearer(auto_error=False)

# DEV_USER token constant
DEV_TOKEN = "dev-token"


async def get_or_create_user(
    db: AsyncSession,
    firebase_uid: str,
    email: str,
    display_name: str,
    role: str | None = None,
) -> User:
    """Look up the profile for a Firebase uid, creating it on first sign-in."""
    result = await db.execute(select(User).where(User.firebase_uid == firebase_uid))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            firebase_uid=firebase_uid,
            email=email,
            display_name=display_name,
            role=role or settings.default_role,
        )
        db.add(user)
        logger.info(f"Created profile for {email} with role {user.role}")
    else:
        user.last_active_at = utcnow()
    await db.flush()
    return user


async def _authenticate_user(
    db: AsyncSession,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> User:
    """Core authentication logic shared by all auth dependencies.

    Authentication priority:
    1. dev-token bypass (dev_mode only)
    2. Authorization: Bearer <token> (Firebase)
    """
    # Check for dev mode bypass
    if settings.dev_mode:
        token = credentials.credentials if credentials else None
        if token == DEV_TOKEN or token is None:
            return await get_or_create_user(
                db,
                firebase_uid=settings.dev_user_id,
                email=settings.dev_user_email,
                display_name=settings.dev_user_name,
                role=settings.dev_user_role,
            )

    # Require credentials in production
    if not credentials:
        raise AuthenticationError("Missing authentication token")

    token = credentials.credentials

    try:
        # Initialize Firebase if needed
        get_firebase_app()

        # Verify the Firebase token
        decoded_token = firebase_auth.verify_id_token(token)
    except firebase_auth.CertificateFetchError as e:
        raise ConnectivityError(f"Identity provider unreachable: {e}") from e
    except (ValueError, FirebaseError) as e:
        raise AuthenticationError(f"Invalid authentication token: {e}") from e

    firebase_uid = decoded_token["uid"]
    email = decoded_token.get("email", "")
    name = decoded_token.get("name") or email.split("@")[0]
    return await get_or_create_user(db, firebase_uid, email, name)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Authenticate user. Holds DB connection for the request lifecycle.

    Use this for profile endpoints that keep working with the User row.
    For everything else, use CurrentIdentity instead.
    """
    return await _authenticate_user(db, credentials)


async def get_current_identity(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Identity:
    """Authenticate user with a short-lived DB session.

    Unlike CurrentUser, this does NOT hold a DB connection after auth completes.
    Logging sessions and SSE streams outlive the request, so they must not
    pin a connection.
    """
    async with async_session_maker() as db:
        user = await _authenticate_user(db, credentials)
        await db.commit()
        return Identity.from_user(user)
    # Session closed here, connection returned to pool


async def get_admin_identity(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    require_admin(identity)
    return identity


async def get_submitter_identity(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    require_submit(identity)
    return identity


def get_entry_store() -> EntryStore:
    return entry_store


def get_reference_store() -> ReferenceStore:
    return reference_store


def get_session_manager() -> SessionManager:
    return session_manager


def get_projection() -> RealtimeProjection:
    return projection


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
AdminIdentity = Annotated[Identity, Depends(get_admin_identity)]
SubmitterIdentity = Annotated[Identity, Depends(get_submitter_identity)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
Entries = Annotated[EntryStore, Depends(get_entry_store)]
References = Annotated[ReferenceStore, Depends(get_reference_store)]
Sessions = Annotated[SessionManager, Depends(get_session_manager)]
Projection = Annotated[RealtimeProjection, Depends(get_projection)]
