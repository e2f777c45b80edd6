"""
Bookshelf Backend — Auth Service (Registration & Login)
=========================================================

What:  Creates credentials and exchanges valid credentials for bearer tokens.
Why:   Keeps password handling and token issuance out of the HTTP layer.
How:   bcrypt for password hashes, TokenService for JWTs, one AsyncSession per call.
Who:   Called by the /api/auth route handlers; the password helpers are also
       used by first-boot seeding.

Registration Flow:
    ┌──────────────┐    ┌──────────────┐    ┌─────────────┐    ┌─────────┐
    │ Username     │───▶│ bcrypt hash  │───▶│ INSERT user │───▶│ issue   │
    │ free?        │    │ (thread)     │    │ role=USER   │    │ token   │
    └──────────────┘    └──────────────┘    └─────────────┘    └─────────┘

Login Flow:
    Look up username → bcrypt check → issue token.
    Unknown username and wrong password raise the same InvalidCredentialsError,
    so a caller cannot probe which usernames exist. Database failures are NOT
    folded into that error; they surface as DatabaseError (500).

Why bcrypt runs in a worker thread:
    A 12-round hash takes ~250ms of pure CPU. Running it on the event loop
    would stall every other in-flight request for that long.
"""

import asyncio
import logging
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.exceptions import (
    DatabaseError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from bookshelf.models.user import Role, User
from bookshelf.schemas.auth import AuthResponse
from bookshelf.services.token_service import TokenService

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases reject longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash. A corrupt hash never matches."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class AuthService:
    """
    Registration and login.

    Holds no per-request state; the app factory builds one instance with the
    application's TokenService and bcrypt work factor.
    """

    def __init__(self, token_service: TokenService, bcrypt_rounds: int = 12):
        self._tokens = token_service
        self._rounds = bcrypt_rounds

    async def register(self, db: AsyncSession, username: str, password: str) -> AuthResponse:
        """
        Create a USER credential and return a token for it.

        Raises:
            DuplicateUsernameError: Username is taken (→ 400)
            ValidationError: Password longer than bcrypt can hash (→ 400)
            DatabaseError: Lookup or insert failed for another reason (→ 500)
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

        if await self._find_user(db, username) is not None:
            logger.info("Registration rejected: username '%s' already exists", username)
            raise DuplicateUsernameError(username)

        password_hash = await asyncio.to_thread(hash_password, password, self._rounds)
        user = User(username=username, password_hash=password_hash, role=Role.USER)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            logger.info("Registration rejected: username '%s' inserted concurrently", username)
            raise DuplicateUsernameError(username)
        except SQLAlchemyError as e:
            logger.error("Database error registering '%s': %s", username, str(e))
            raise DatabaseError(context={"operation": "register"})

        logger.info("Registered user '%s' (id=%s)", user.username, user.id)
        return self._authenticated(user)

    async def login(self, db: AsyncSession, username: str, password: str) -> AuthResponse:
        """
        Exchange username/password for a token.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password (→ 400)
            DatabaseError: Lookup failed (→ 500)
        """
        user = await self._find_user(db, username)
        if user is None:
            logger.info("Login failed for '%s': unknown username", username)
            raise InvalidCredentialsError(reason="unknown_username")

        matches = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not matches:
            logger.info("Login failed for '%s': password mismatch", username)
            raise InvalidCredentialsError(reason="password_mismatch")

        logger.info("User '%s' logged in", user.username)
        return self._authenticated(user)

    async def _find_user(self, db: AsyncSession, username: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user '%s': %s", username, str(e))
            raise DatabaseError(context={"operation": "find_user"})

    def _authenticated(self, user: User) -> AuthResponse:
        role = user.role.value if isinstance(user.role, Role) else str(user.role)
        return AuthResponse(
            token=self._tokens.issue(user.username),
            username=user.username,
            role=role,
        )
