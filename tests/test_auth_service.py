"""
Bookshelf Backend — Auth Service Tests
=========================================

What:  Registration, login, and the bcrypt helpers.
How:   Integration tests run against the temp SQLite database (db_session);
       failure paths use the mock session so no database error has to be staged.

What we test:
    ✅ Register creates a USER and returns a verifiable token
    ✅ Duplicate username rejected, first credential untouched
    ✅ Unique-constraint conflict on insert reported as a duplicate username
    ✅ Wrong password and unknown user fail identically
    ✅ Passwords longer than bcrypt's 72-byte limit rejected
    ✅ Lookup failures surface as DatabaseError, not bad credentials
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from bookshelf.exceptions import (
    DatabaseError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from bookshelf.models.user import Role, User
from bookshelf.services.auth_service import AuthService, hash_password, verify_password
from bookshelf.services.token_service import TokenService


def _service() -> AuthService:
    tokens = TokenService(secret="auth-test-secret-0123456789abcdef", ttl_seconds=3600)
    return AuthService(tokens, bcrypt_rounds=4)


class TestPasswordHelpers:

    def test_hash_verifies(self):
        hashed = hash_password("s3cret", rounds=4)
        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed) is True

    def test_wrong_password(self):
        assert verify_password("nope", hash_password("s3cret", rounds=4)) is False

    def test_same_password_gets_fresh_salt(self):
        assert hash_password("s3cret", rounds=4) != hash_password("s3cret", rounds=4)

    def test_corrupt_hash_never_matches(self):
        assert verify_password("s3cret", "not-a-bcrypt-hash") is False


class TestRegister:

    def setup_method(self):
        self.service = _service()

    @pytest.mark.asyncio
    async def test_register_creates_user_role(self, db_session):
        response = await self.service.register(db_session, "alice", "pw1")
        await db_session.commit()

        assert response.username == "alice"
        assert response.role == "USER"
        assert self.service._tokens.verify(response.token).username == "alice"

        user = (await db_session.execute(select(User).where(User.username == "alice"))).scalar_one()
        assert user.role == Role.USER
        assert user.password_hash != "pw1"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_session):
        await self.service.register(db_session, "alice", "pw1")
        await db_session.commit()

        with pytest.raises(DuplicateUsernameError) as exc_info:
            await self.service.register(db_session, "alice", "other")

        assert exc_info.value.message == "Username already exists"
        # First password still works
        await db_session.rollback()
        assert (await self.service.login(db_session, "alice", "pw1")).username == "alice"

    @pytest.mark.asyncio
    async def test_insert_conflict_is_duplicate_username(self, mock_db_session):
        """Another registration of the same name committed between lookup and insert."""
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result
        mock_db_session.flush.side_effect = IntegrityError(
            "INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.username")
        )

        with pytest.raises(DuplicateUsernameError) as exc_info:
            await self.service.register(mock_db_session, "bob", "pw1")

        assert exc_info.value.message == "Username already exists"
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_insert_failure_is_database_error(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result
        mock_db_session.flush.side_effect = OperationalError("INSERT INTO users", {}, Exception("disk full"))

        with pytest.raises(DatabaseError):
            await self.service.register(mock_db_session, "bob", "pw1")

    @pytest.mark.asyncio
    async def test_password_over_72_bytes(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(mock_db_session, "alice", "é" * 37)

        assert exc_info.value.context["field"] == "password"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.register(mock_db_session, "alice", "pw1")


class TestLogin:

    def setup_method(self):
        self.service = _service()

    @pytest.mark.asyncio
    async def test_login_success(self, db_session):
        await self.service.register(db_session, "alice", "pw1")
        await db_session.commit()

        response = await self.service.login(db_session, "alice", "pw1")

        assert response.username == "alice"
        assert response.role == "USER"
        assert self.service._tokens.verify(response.token).valid is True

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_look_the_same(self, db_session):
        await self.service.register(db_session, "alice", "pw1")
        await db_session.commit()

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await self.service.login(db_session, "alice", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await self.service.login(db_session, "nobody", "pw1")

        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.message == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_lookup_failure_is_not_bad_credentials(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.login(mock_db_session, "alice", "pw1")

    @pytest.mark.asyncio
    async def test_unknown_user_with_mock_session(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(InvalidCredentialsError):
            await self.service.login(mock_db_session, "ghost", "pw1")
