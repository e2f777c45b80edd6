"""
Bookshelf Backend — Request Gate (Bearer Token Middleware)
============================================================

What:  Decides, once per request and before routing, whether the caller must
       present a valid bearer token.
Why:   Access rules live in one table instead of being repeated on each route,
       and a protected handler can never run for an unauthenticated caller.
How:   Match (method, path) against the public rules; anything else under
       /api/books requires `Authorization: Bearer <jwt>`, checked with the
       app's TokenService.

Decision per request:
    OPTIONS (CORS preflight) ─────────────────────────▶ pass
    path outside /api/books ──────────────────────────▶ pass
    matches PUBLIC_BOOK_ROUTES ───────────────────────▶ pass
    otherwise: verify token ── invalid/missing ───────▶ 401, halt
                            └─ valid ─────────────────▶ request.state.username, pass

Why return a response instead of raising UnauthorizedError:
    Exceptions raised inside BaseHTTPMiddleware bypass FastAPI's exception
    handlers, so the gate builds the same error body itself.
"""

import logging
import re
from typing import Optional, Pattern, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from bookshelf.middleware.request_id import request_id_var
from bookshelf.services.token_service import TokenService

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "/api/books"

# (method, full-path regex); anchored so /api/books/{id} never matches a public rule
PUBLIC_BOOK_ROUTES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("GET", re.compile(r"^/api/books/?$")),
    ("GET", re.compile(r"^/api/books/search/?$")),
    ("GET", re.compile(r"^/api/books/authors/?$")),
    ("GET", re.compile(r"^/api/books/featured/?$")),
    ("GET", re.compile(r"^/api/books/stats/.+$")),
    ("GET", re.compile(r"^/api/books/author/[^/]+/?$")),
    ("GET", re.compile(r"^/api/books/rating/[^/]+/?$")),
)


def is_public(method: str, path: str) -> bool:
    """True when the request may proceed without a token."""
    if method == "OPTIONS":
        return True
    if path != PROTECTED_PREFIX and not path.startswith(PROTECTED_PREFIX + "/"):
        return True
    return any(method == m and pattern.match(path) for m, pattern in PUBLIC_BOOK_ROUTES)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    credentials = credentials.strip()
    return credentials or None


class AuthGateMiddleware(BaseHTTPMiddleware):
    """
    Rejects unauthenticated requests to protected book routes with 401.

    The TokenService is read from `request.app.state.token_service`, which the
    app factory sets, so the gate never touches process-wide globals.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        method = request.method
        path = request.url.path

        if is_public(method, path):
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("Authorization"))
        token_service: TokenService = request.app.state.token_service
        verification = token_service.verify(token)

        if not verification.valid:
            rid = request_id_var.get("")
            logger.warning(
                "[%s] Rejected %s %s: %s",
                rid,
                method,
                path,
                "missing bearer token" if token is None else "invalid or expired token",
            )
            return JSONResponse(
                status_code=401,
                content={
                    "error": "unauthorized",
                    "message": "Authentication required. Provide a valid bearer token.",
                    "request_id": rid,
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.username = verification.username
        return await call_next(request)
