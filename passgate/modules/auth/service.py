"""Authentication service for registration, login and password changes."""

import asyncio
from dataclasses import dataclass
from uuid import UUID

import structlog

from passgate.infrastructure.observability import add_span_attributes, traced
from passgate.modules.auth.exceptions import (
    AuthenticationError,
    IncorrectPasswordError,
    PasswordPolicyError,
    UserNotFoundError,
)
from passgate.modules.auth.models import User
from passgate.modules.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from passgate.modules.auth.policy import validate_password
from passgate.modules.auth.repository import AuditLogRepository, UserRepository
from passgate.modules.auth.tokens import TokenIssuer

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"
FAILED_LOGIN_DESCRIPTION = "Failed attempt to login in"
PASSWORD_CHANGED_DESCRIPTION = "Password changed successfully"
DUMMY_PASSWORD = "passgate-timing-equalizer"


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a successful login."""

    user: User
    token: str
    expires_in: int


class AuthService:
    """Service for authentication operations.

    Handles user registration, login, and password changes. bcrypt work runs
    in a worker thread so it does not block the event loop.
    """

    def __init__(
        self,
        users: UserRepository,
        logs: AuditLogRepository,
        tokens: TokenIssuer,
        *,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        """Initialize the auth service.

        Args:
            users: User repository.
            logs: Audit log repository.
            tokens: Bearer token issuer.
            bcrypt_rounds: bcrypt cost factor for new hashes.
        """
        self._users = users
        self._logs = logs
        self._tokens = tokens
        self._bcrypt_rounds = bcrypt_rounds
        # Checked on unknown emails so they cost the same as a wrong password
        self._dummy_hash = hash_password(DUMMY_PASSWORD, bcrypt_rounds)

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)

    async def _verify(self, password: str, hashed_password: str) -> bool:
        return await asyncio.to_thread(verify_password, password, hashed_password)

    @staticmethod
    def _check_policy(password: str) -> None:
        violations = validate_password(password)
        if violations:
            raise PasswordPolicyError(violations)

    @traced("auth.register")
    async def register(self, name: str, email: str, password: str) -> User:
        """Register a new user.

        Args:
            name: Display name.
            email: User's email address.
            password: Plain text password.

        Returns:
            The created User.

        Raises:
            PasswordPolicyError: If the password is too weak.
            UserAlreadyExistsError: If email already exists.
            CredentialStoreError: If the store fails.
        """
        self._check_policy(password)

        hashed = await self._hash(password)
        user = await self._users.create(
            name=name,
            email=email.lower(),
            hashed_password=hashed,
        )

        add_span_attributes({"user.id": str(user.id)})
        logger.info("user_registered", user_id=str(user.id), email=user.email)
        return user

    @traced("auth.authenticate")
    async def authenticate(self, email: str, password: str) -> User:
        """Authenticate a user by email and password.

        A wrong password is recorded in the user's audit log. Unknown emails
        and wrong passwords produce the same error.

        Args:
            email: User's email address.
            password: Plain text password.

        Returns:
            The authenticated User.

        Raises:
            AuthenticationError: If authentication fails.
            CredentialStoreError: If the store fails.
        """
        user = await self._users.get_by_email(email)

        if user is None:
            await self._verify(password, self._dummy_hash)
            logger.warning("auth_failed_user_not_found", email=email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await self._verify(password, user.hashed_password):
            await self._logs.append(user.id, FAILED_LOGIN_DESCRIPTION)
            logger.warning("auth_failed_invalid_password", user_id=str(user.id))
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("user_authenticated", user_id=str(user.id))
        return user

    @traced("auth.login")
    async def login(self, email: str, password: str) -> LoginResult:
        """Authenticate user and issue a bearer token.

        Raises:
            AuthenticationError: If authentication fails.
            CredentialStoreError: If the store fails.
        """
        user = await self.authenticate(email, password)
        issued = self._tokens.issue(user)

        add_span_attributes({"user.id": str(user.id)})
        return LoginResult(user=user, token=issued.token, expires_in=issued.expires_in)

    @traced("auth.change_password")
    async def change_password(
        self,
        email: str,
        current_password: str,
        new_password: str,
    ) -> None:
        """Replace a user's password after checking the current one.

        Args:
            email: User's email address.
            current_password: The password currently on record.
            new_password: The replacement password.

        Raises:
            UserNotFoundError: If no user has this email.
            IncorrectPasswordError: If current_password does not match.
            PasswordPolicyError: If new_password is too weak.
            CredentialStoreError: If the store fails.
        """
        user = await self._users.get_by_email(email)

        if user is None:
            logger.warning("password_change_user_not_found", email=email)
            raise UserNotFoundError(email)

        if not await self._verify(current_password, user.hashed_password):
            logger.warning("password_change_rejected", user_id=str(user.id))
            raise IncorrectPasswordError()

        self._check_policy(new_password)

        hashed = await self._hash(new_password)
        await self._users.update_password(user.id, hashed)
        await self._logs.append(user.id, PASSWORD_CHANGED_DESCRIPTION)

        add_span_attributes({"user.id": str(user.id)})
        logger.info("password_changed", user_id=str(user.id))

    async def get_current_user(self, token: str) -> User:
        """Resolve the user a bearer token was issued to.

        Raises:
            AuthenticationError: If the token is invalid, expired, or its user
                no longer exists.
        """
        payload = self._tokens.decode(token)

        try:
            user_id = UUID(payload.sub)
        except ValueError as e:
            raise AuthenticationError("Invalid token") from e

        user = await self._users.get_by_id(user_id)
        if user is None:
            logger.warning("token_user_missing", user_id=payload.sub)
            raise AuthenticationError("Invalid token")

        return user
