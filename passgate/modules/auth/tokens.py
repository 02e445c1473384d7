"""Bearer token issuing and verification."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
import structlog

from passgate.config import Settings
from passgate.modules.auth.exceptions import AuthenticationError
from passgate.modules.auth.models import User
from passgate.modules.auth.schemas import TokenPayload

logger = structlog.get_logger()


@dataclass(frozen=True)
class IssuedToken:
    """A signed token and its lifetime in seconds."""

    token: str
    expires_in: int


class TokenIssuer:
    """Signs and verifies JWT bearer tokens.

    Tokens carry the user ID as ``sub`` and the user's display name as
    ``name``.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        expire_hours: int = 1,
    ) -> None:
        """Initialize the issuer.

        Args:
            secret: Secret key for JWT signing.
            algorithm: Algorithm for JWT signing.
            expire_hours: Hours until token expiration.
        """
        self._secret = secret
        self._algorithm = algorithm
        self._expire_hours = expire_hours

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        """Build an issuer from application settings.

        Raises:
            ValueError: If no JWT secret is configured.
        """
        if settings.jwt_secret_key is None:
            raise ValueError("JWT_SECRET_KEY must be set")

        return cls(
            settings.jwt_secret_key.get_secret_value(),
            algorithm=settings.jwt_algorithm,
            expire_hours=settings.jwt_expire_hours,
        )

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return self._expire_hours * 3600

    def issue(self, user: User) -> IssuedToken:
        """Create a signed token for a user.

        Args:
            user: The user to create a token for.

        Returns:
            The token and its lifetime.
        """
        now = datetime.now(UTC)
        expires = now + timedelta(hours=self._expire_hours)

        # JWT requires integer timestamps for exp and iat
        payload = {
            "sub": str(user.id),
            "name": user.name,
            "exp": int(expires.timestamp()),
            "iat": int(now.timestamp()),
        }

        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_in=self.expires_in)

    def decode(self, token: str) -> TokenPayload:
        """Verify and decode a token.

        Args:
            token: JWT token string.

        Returns:
            Decoded token payload.

        Raises:
            AuthenticationError: If token is invalid or expired.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
            return TokenPayload(
                sub=payload["sub"],
                name=payload.get("name", ""),
                exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
                iat=datetime.fromtimestamp(payload["iat"], tz=UTC),
            )

        except jwt.ExpiredSignatureError as e:
            logger.warning("token_expired")
            raise AuthenticationError("Token has expired") from e

        except jwt.InvalidTokenError as e:
            logger.warning("token_invalid", error=str(e))
            raise AuthenticationError("Invalid token") from e
