"""
Bookshelf Backend — Auth Request/Response Schemas
"""

from pydantic import BaseModel, Field


class AuthRequest(BaseModel):
    """Body of POST /api/auth/register and POST /api/auth/login."""

    username: str = Field(min_length=1, max_length=100, description="Account name")
    password: str = Field(min_length=1, max_length=256, description="Plain-text password")


class AuthResponse(BaseModel):
    """
    What:  Successful register/login result.
    How:   Clients send `token` back as `Authorization: Bearer <token>`.
    """

    token: str = Field(description="Signed JWT")
    username: str
    role: str = Field(description="ADMIN or USER")
