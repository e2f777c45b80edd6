"""
Bookshelf Backend — Token Service (JWT issue/verify)
======================================================

What:  Issues and verifies signed, time-limited bearer tokens.
Why:   Stateless verification: no session table, and any replica holding the
       shared secret can verify tokens issued by any other replica.
How:   HS256 JWT via authlib. Claims: sub (username), iat, exp.
Who:   AuthService issues; the Request Gate middleware verifies.

Verification never raises. Bad signature, malformed token, wrong algorithm,
missing subject, and expiry all come back as `TokenVerification(valid=False)`,
so callers have exactly one branch to handle.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from authlib.jose import JoseError, JsonWebToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenVerification:
    """Outcome of `TokenService.verify`. `username` is set only when valid."""

    valid: bool
    username: Optional[str] = None


INVALID_TOKEN = TokenVerification(valid=False)


class TokenService:
    """
    Signs and checks JWTs with a server-held secret.

    Args:
        secret:      HMAC key shared by every replica
        ttl_seconds: Lifetime of an issued token
        algorithm:   HS256 / HS384 / HS512; the only algorithm accepted on verify
        clock:       Returns the current UNIX time. Injected so tests can move time.
    """

    def __init__(
        self,
        secret: str,
        ttl_seconds: int,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._ttl = ttl_seconds
        self._algorithm = algorithm
        self._clock = clock
        # Restricting the registry to one algorithm rejects "none" and any
        # attempt to switch algorithms through the token header
        self._jwt = JsonWebToken([algorithm])

    def issue(self, username: str) -> str:
        """Produce a signed token binding `username` and an expiry."""
        now = int(self._clock())
        header = {"alg": self._algorithm, "typ": "JWT"}
        payload = {
            "sub": username,
            "iat": now,
            "exp": now + self._ttl,
        }
        token = self._jwt.encode(header, payload, self._secret)
        # authlib returns bytes
        return token.decode() if isinstance(token, bytes) else token

    def verify(self, token: Optional[str]) -> TokenVerification:
        """
        Check signature integrity, structure, and expiry.

        A token is valid while `now <= exp`. Anything that cannot be decoded
        is reported as invalid rather than raised.
        """
        if not token or not isinstance(token, str):
            return INVALID_TOKEN

        now = int(self._clock())
        try:
            claims = self._jwt.decode(token, self._secret)
            claims.validate(now=now, leeway=0)
        except (JoseError, ValueError, TypeError, KeyError) as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            return INVALID_TOKEN

        subject = claims.get("sub")
        expires_at = claims.get("exp")
        if not isinstance(subject, str) or not subject:
            logger.debug("Token rejected: missing subject")
            return INVALID_TOKEN
        # authlib only checks exp when present; an unbounded token is not acceptable
        if not isinstance(expires_at, int) or now > expires_at:
            logger.debug("Token rejected: missing or past expiry")
            return INVALID_TOKEN

        return TokenVerification(valid=True, username=subject)
