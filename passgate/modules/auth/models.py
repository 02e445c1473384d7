"""Authentication domain models."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class User:
    """User domain model.

    Represents an account that can log in with email and password.

    Attributes:
        id: Unique user identifier.
        name: Display name.
        email: User's email address (used for login).
        hashed_password: Bcrypt-hashed password.
        created_at: When the user was created.
        updated_at: When the user was last updated.
    """

    id: UUID
    name: str
    email: str
    hashed_password: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, object]) -> "User":
        """Create a User from a database row.

        Args:
            row: Database row as a dictionary.

        Returns:
            User instance.
        """
        return cls(
            id=UUID(str(row["id"])),
            name=str(row["name"]),
            email=str(row["email"]),
            hashed_password=str(row["hashed_password"]),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            updated_at=datetime.fromisoformat(str(row["updated_at"])),
        )


@dataclass(frozen=True)
class LogEntry:
    """Append-only audit record tied to a user."""

    id: UUID
    user_id: UUID
    description: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, object]) -> "LogEntry":
        return cls(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            description=str(row["description"]),
            created_at=datetime.fromisoformat(str(row["created_at"])),
        )
