"""Identity provider port and the JWT bearer implementation."""

import os
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

import structlog
from jose import JWTError, jwt

logger = structlog.get_logger(__name__)

DEFAULT_SECRET = "storefront-dev-secret"
ALGORITHM = "HS256"


class IdentityProvider(ABC):
    @abstractmethod
    def resolve(self, token: str | None) -> str | None:
        """Return the user id the token belongs to, or None if it is not valid."""
        ...


class JWTIdentityProvider(IdentityProvider):
    def __init__(self, secret: str, algorithm: str = ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm

    @classmethod
    def from_env(cls):
        secret = os.getenv("STOREFRONT_JWT_SECRET")
        if not secret:
            logger.warning("STOREFRONT_JWT_SECRET not set, using the development secret")
            secret = DEFAULT_SECRET
        return cls(secret=secret)

    def issue(self, user_id: str, expires_in: timedelta = timedelta(hours=12)) -> str:
        """Mint a token for ``user_id`` (development and tests)."""
        payload = {"sub": str(user_id), "exp": datetime.now(UTC) + expires_in}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def resolve(self, token: str | None) -> str | None:
        if not token:
            return None
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info("Rejected bearer token", error=str(e))
            return None
        return payload.get("sub") or None
