#!/usr/bin/env python3
"""CLI script to create users.

Usage:
    uv run python scripts/create_user.py "Ada Lovelace" ada@example.com 'Str0ng!pass'
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to path so we can import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from passgate.config import Settings
from passgate.infrastructure.database import open_database
from passgate.modules.auth import (
    AuditLogRepository,
    AuthService,
    PasswordPolicyError,
    TokenIssuer,
    UserAlreadyExistsError,
    UserRepository,
)


async def create_user(name: str, email: str, password: str) -> None:
    """Create a user in the database.

    Args:
        name: User's display name.
        email: User's email address.
        password: User's password (will be checked and hashed).
    """
    settings = Settings()

    try:
        tokens = TokenIssuer.from_settings(settings)
    except ValueError:
        print("✗ Error: JWT_SECRET_KEY not set in .env", file=sys.stderr)
        print("  Please add JWT_SECRET_KEY to your .env file", file=sys.stderr)
        sys.exit(1)

    db = await open_database(settings.database_path)

    try:
        users = UserRepository(db)
        auth_service = AuthService(
            users,
            AuditLogRepository(db),
            tokens,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

        user = await auth_service.register(name, email, password)

        print(f"✓ Created user: {user.name} <{user.email}>")
        print(f"  User ID: {user.id}")
        print(f"  Created at: {user.created_at}")
        print(f"  Total users: {await users.count()}")

    except PasswordPolicyError as e:
        print("✗ Error: password rejected", file=sys.stderr)
        for violation in e.violations:
            print(f"  - {violation}", file=sys.stderr)
        sys.exit(1)
    except UserAlreadyExistsError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await db.disconnect()


def main() -> None:
    """Parse arguments and create user."""
    parser = argparse.ArgumentParser(
        description="Create a user account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run python scripts/create_user.py "Ada Lovelace" ada@example.com 'Str0ng!pass'

Passwords need at least 8 characters with lowercase, uppercase,
digit and symbol characters.
        """,
    )

    parser.add_argument("name", help="User's display name")
    parser.add_argument("email", help="User's email address")
    parser.add_argument("password", help="User's password")

    args = parser.parse_args()

    asyncio.run(create_user(args.name, args.email, args.password))


if __name__ == "__main__":
    main()
