"""FastAPI dependencies that hand out per-application services."""

from fastapi import Request

from bookshelf.exceptions import UnauthorizedError
from bookshelf.services.auth_service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """Get the AuthService built by the app factory."""
    return request.app.state.auth_service


def get_current_username(request: Request) -> str:
    """
    Username the Request Gate attached to this request.

    Only meaningful on protected routes; raises 401 if a route using it was
    left off the gate's protected set by mistake.
    """
    username = getattr(request.state, "username", None)
    if not username:
        raise UnauthorizedError()
    return username
