"""Tests for Firebase account creation paired with profile rows."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from firebase_admin.exceptions import FirebaseError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from realitylog.exceptions import ConflictError
from realitylog.services import accounts


@pytest.fixture
def db():
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(**{"scalar_one_or_none.return_value": None})
    return db


@pytest.fixture
def firebase():
    with (
        patch("realitylog.services.accounts.get_firebase_app"),
        patch(
            "realitylog.services.accounts.firebase_auth.create_user",
            return_value=MagicMock(uid="firebase-uid-1"),
        ) as create_user,
        patch("realitylog.services.accounts.firebase_auth.delete_user") as delete_user,
    ):
        yield MagicMock(create_user=create_user, delete_user=delete_user)


class TestCreateAccount:
    @pytest.mark.asyncio
    async def test_creates_profile_with_default_role(self, db, firebase):
        user = await accounts.create_account(db, "new@example.com", "secret123", "New")

        assert user.firebase_uid == "firebase-uid-1"
        assert user.role == "viewer"
        db.add.assert_called_once_with(user)
        firebase.delete_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_profile_write_removes_firebase_account(self, db, firebase):
        db.flush.side_effect = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE"))

        with pytest.raises(IntegrityError):
            await accounts.create_account(db, "new@example.com", "secret123", "New")

        firebase.delete_user.assert_called_once_with("firebase-uid-1")

    @pytest.mark.asyncio
    async def test_cleanup_failure_keeps_original_error(self, db, firebase):
        db.flush.side_effect = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE"))
        firebase.delete_user.side_effect = FirebaseError("UNAVAILABLE", "backend down")

        with pytest.raises(IntegrityError):
            await accounts.create_account(db, "new@example.com", "secret123", "New")

    @pytest.mark.asyncio
    async def test_existing_email_never_reaches_firebase(self, db, firebase):
        db.execute.return_value = MagicMock(**{"scalar_one_or_none.return_value": MagicMock()})

        with pytest.raises(ConflictError):
            await accounts.create_account(db, "taken@example.com", "secret123", "Taken")

        firebase.create_user.assert_not_called()
