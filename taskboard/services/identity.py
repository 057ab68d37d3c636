"""Bearer token verification yielding the caller's owner identifier."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from ..config import Settings

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a bearer credential is missing or cannot be verified."""


class IdentityProvider:
    """Verifies HS256-signed JWTs and returns their ``sub`` claim."""

    def __init__(self, settings: Settings):
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.expire_minutes = settings.access_token_expire_minutes

    def create_access_token(self, owner_id: str, expires_in: Optional[timedelta] = None) -> str:
        """Issue a signed token for ``owner_id``."""
        expire = datetime.now(timezone.utc) + (expires_in or timedelta(minutes=self.expire_minutes))
        claims = {"sub": owner_id, "exp": expire}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def authenticate(self, authorization: Optional[str]) -> str:
        """Resolve an ``Authorization`` header value to an owner identifier.

        Raises:
            AuthenticationError: If the header is missing, malformed or the token is invalid
        """
        if not authorization or not authorization.startswith("Bearer "):
            raise AuthenticationError("Not authorized, no token")

        token = authorization[len("Bearer "):].strip()
        if not token:
            raise AuthenticationError("Not authorized, no token")

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Token verification failed: {str(e)}")
            raise AuthenticationError("Not authorized, token failed") from e

        owner_id = payload.get("sub")
        if not owner_id:
            logger.warning("Token has no subject claim")
            raise AuthenticationError("Not authorized, token failed")

        return str(owner_id)
