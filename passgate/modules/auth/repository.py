"""Repositories for users and their audit log."""

import sqlite3
from datetime import datetime, timezone
from uuid import UUID, uuid4

import structlog

from passgate.infrastructure.database import Database
from passgate.modules.auth.exceptions import (
    CredentialStoreError,
    UserAlreadyExistsError,
)
from passgate.modules.auth.models import LogEntry, User

logger = structlog.get_logger()


class UserRepository:
    """Repository for User persistence.

    Handles all database interactions for the User model.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the repository.

        Args:
            database: Database connection.
        """
        self._db = database

    async def create(self, name: str, email: str, hashed_password: str) -> User:
        """Create a new user.

        Args:
            name: Display name.
            email: User's email address.
            hashed_password: Bcrypt-hashed password.

        Returns:
            The created User.

        Raises:
            UserAlreadyExistsError: If email already exists.
            CredentialStoreError: If the insert fails for any other reason.
        """
        user_id = uuid4()
        now = datetime.now(timezone.utc).isoformat()

        try:
            await self._db.execute(
                """
                INSERT INTO users (id, name, email, hashed_password,
                                   created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(user_id), name, email, hashed_password, now, now),
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE constraint failed" in str(e):
                raise UserAlreadyExistsError(email, str(e)) from e
            raise CredentialStoreError("create_user", str(e)) from e
        except sqlite3.Error as e:
            raise CredentialStoreError("create_user", str(e)) from e

        logger.info("user_created", user_id=str(user_id), email=email)

        return User(
            id=user_id,
            name=name,
            email=email,
            hashed_password=hashed_password,
            created_at=datetime.fromisoformat(now),
            updated_at=datetime.fromisoformat(now),
        )

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID.

        Returns:
            User if found, None otherwise.
        """
        try:
            row = await self._db.fetch_one(
                "SELECT * FROM users WHERE id = ?",
                (str(user_id),),
            )
        except sqlite3.Error as e:
            raise CredentialStoreError("get_user_by_id", str(e)) from e

        if row is None:
            return None

        return User.from_row(dict(row))

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email.

        Args:
            email: The user's email address.

        Returns:
            User if found, None otherwise.
        """
        try:
            row = await self._db.fetch_one(
                "SELECT * FROM users WHERE email = ?",
                (email.lower(),),
            )
        except sqlite3.Error as e:
            raise CredentialStoreError("get_user_by_email", str(e)) from e

        if row is None:
            return None

        return User.from_row(dict(row))

    async def update_password(self, user_id: UUID, hashed_password: str) -> None:
        """Replace a user's password hash.

        Args:
            user_id: The user's UUID.
            hashed_password: New bcrypt hash.
        """
        now = datetime.now(timezone.utc).isoformat()

        try:
            await self._db.execute(
                "UPDATE users SET hashed_password = ?, updated_at = ? WHERE id = ?",
                (hashed_password, now, str(user_id)),
            )
        except sqlite3.Error as e:
            raise CredentialStoreError("update_user_password", str(e)) from e

        logger.info("user_password_updated", user_id=str(user_id))

    async def count(self) -> int:
        """Count total users.

        Returns:
            Number of users.
        """
        try:
            row = await self._db.fetch_one("SELECT COUNT(*) as count FROM users")
        except sqlite3.Error as e:
            raise CredentialStoreError("count_users", str(e)) from e

        return int(row["count"]) if row else 0


class AuditLogRepository:
    """Append-only store for per-user log entries."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def append(self, user_id: UUID, description: str) -> LogEntry:
        """Record an event for a user.

        Args:
            user_id: The user the event concerns.
            description: Human-readable description.

        Returns:
            The stored LogEntry.

        Raises:
            CredentialStoreError: If the insert fails.
        """
        entry = LogEntry(
            id=uuid4(),
            user_id=user_id,
            description=description,
            created_at=datetime.now(timezone.utc),
        )

        try:
            await self._db.execute(
                """
                INSERT INTO logs (id, user_id, description, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    str(entry.id),
                    str(entry.user_id),
                    entry.description,
                    entry.created_at.isoformat(),
                ),
            )
        except sqlite3.Error as e:
            raise CredentialStoreError("append_log", str(e)) from e

        logger.info("log_appended", user_id=str(user_id), description=description)
        return entry

    async def list_for_user(self, user_id: UUID) -> list[LogEntry]:
        """List a user's log entries, oldest first."""
        try:
            rows = await self._db.fetch_all(
                "SELECT * FROM logs WHERE user_id = ? ORDER BY created_at",
                (str(user_id),),
            )
        except sqlite3.Error as e:
            raise CredentialStoreError("list_logs", str(e)) from e

        return [LogEntry.from_row(dict(row)) for row in rows]
