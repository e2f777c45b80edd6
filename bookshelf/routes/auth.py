"""
Bookshelf Backend — Auth Route Handlers
=========================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/test.
How:   Delegates to AuthService; failures become 400 via the AuthError handler.
Who:   Public routes; the Request Gate never checks tokens under /api/auth.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.database import get_db_session
from bookshelf.dependencies import get_auth_service
from bookshelf.schemas.auth import AuthRequest, AuthResponse
from bookshelf.schemas.common import ErrorResponse
from bookshelf.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    responses={
        400: {"description": "Username already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an account and receive a token",
)
async def register(
    body: AuthRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """New accounts always get role USER."""
    return await auth_service.register(db, body.username, body.password)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        400: {"description": "Invalid username or password", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Exchange credentials for a token",
)
async def login(
    body: AuthRequest,
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    The 400 message is identical for an unknown username and a wrong
    password.
    """
    return await auth_service.login(db, body.username, body.password)


@router.get(
    "/test",
    response_class=PlainTextResponse,
    summary="Auth router liveness check",
)
async def auth_test() -> str:
    return "Auth endpoint is working!"
