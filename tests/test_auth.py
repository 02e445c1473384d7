"""Tests for authentication module."""

import asyncio
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import jwt
import pytest

from passgate.config import Settings
from passgate.infrastructure.database import Database
from passgate.modules.auth import (
    AuditLogRepository,
    AuthenticationError,
    AuthService,
    CredentialStoreError,
    IncorrectPasswordError,
    PasswordPolicyError,
    TokenIssuer,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserRepository,
    hash_password,
    verify_password,
)
from passgate.modules.auth.models import LogEntry, User
from passgate.modules.auth.policy import MISSING_DIGIT, TOO_SHORT

TEST_SECRET = "test-secret-key-for-testing-only"
TEST_ROUNDS = 4


@pytest.fixture
async def database() -> Database:
    """Create a temporary test database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        db = Database(db_path)
        await db.connect()
        yield db
        await db.disconnect()


@pytest.fixture
async def users(database: Database) -> UserRepository:
    """Create a user repository with test database."""
    return UserRepository(database)


@pytest.fixture
async def logs(database: Database) -> AuditLogRepository:
    """Create an audit log repository with test database."""
    return AuditLogRepository(database)


@pytest.fixture
def tokens() -> TokenIssuer:
    """Create a token issuer with a test secret."""
    return TokenIssuer(TEST_SECRET, expire_hours=1)


@pytest.fixture
async def auth_service(
    users: UserRepository, logs: AuditLogRepository, tokens: TokenIssuer
) -> AuthService:
    """Create an auth service with cheap bcrypt rounds."""
    return AuthService(users, logs, tokens, bcrypt_rounds=TEST_ROUNDS)


class TestModels:
    """Tests for domain models."""

    def test_user_from_row(self) -> None:
        """Should create user from database row."""
        now = datetime.now(timezone.utc).isoformat()
        user_id = uuid4()
        row = {
            "id": str(user_id),
            "name": "Ada",
            "email": "ada@example.com",
            "hashed_password": "hashed",
            "created_at": now,
            "updated_at": now,
        }
        user = User.from_row(row)
        assert user.id == user_id
        assert user.name == "Ada"
        assert user.email == "ada@example.com"

    def test_log_entry_from_row(self) -> None:
        """Should create a log entry from database row."""
        user_id = uuid4()
        row = {
            "id": str(uuid4()),
            "user_id": str(user_id),
            "description": "something happened",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        entry = LogEntry.from_row(row)
        assert entry.user_id == user_id
        assert entry.description == "something happened"


class TestUserRepository:
    """Tests for UserRepository."""

    async def test_create_user(self, users: UserRepository) -> None:
        """Should create a new user."""
        user = await users.create("Ada", "ada@example.com", "hashed_password")

        assert user.name == "Ada"
        assert user.email == "ada@example.com"
        assert user.hashed_password == "hashed_password"

    async def test_create_duplicate_email_fails(self, users: UserRepository) -> None:
        """Should raise a conflict when the email is taken."""
        await users.create("Ada", "ada@example.com", "hashed_password")

        with pytest.raises(UserAlreadyExistsError, match="already exists"):
            await users.create("Other", "ada@example.com", "another_password")

    async def test_get_by_id(self, users: UserRepository) -> None:
        """Should get user by ID."""
        created = await users.create("Ada", "ada@example.com", "hashed")

        found = await users.get_by_id(created.id)

        assert found is not None
        assert found.id == created.id
        assert found.name == "Ada"

    async def test_get_by_id_not_found(self, users: UserRepository) -> None:
        """Should return None for non-existent ID."""
        assert await users.get_by_id(uuid4()) is None

    async def test_get_by_email_is_case_insensitive(
        self, users: UserRepository
    ) -> None:
        """Lookups lower-case the email."""
        await users.create("Ada", "ada@example.com", "hashed")

        found = await users.get_by_email("ADA@example.com")

        assert found is not None
        assert found.email == "ada@example.com"

    async def test_get_by_email_not_found(self, users: UserRepository) -> None:
        """Should return None for non-existent email."""
        assert await users.get_by_email("nobody@example.com") is None

    async def test_update_password(self, users: UserRepository) -> None:
        """Should replace only the hash."""
        user = await users.create("Ada", "ada@example.com", "old_hash")

        await users.update_password(user.id, "new_hash")

        found = await users.get_by_id(user.id)
        assert found is not None
        assert found.hashed_password == "new_hash"
        assert found.name == "Ada"
        assert found.updated_at >= user.updated_at

    async def test_count(self, users: UserRepository) -> None:
        """Should count users."""
        assert await users.count() == 0
        await users.create("Ada", "ada@example.com", "hashed")
        assert await users.count() == 1

    async def test_store_failure_is_wrapped(self, database: Database) -> None:
        """Unexpected database errors surface as CredentialStoreError."""
        await database.execute("DROP TABLE logs")
        await database.execute("DROP TABLE users")
        users = UserRepository(database)

        with pytest.raises(CredentialStoreError):
            await users.get_by_email("ada@example.com")
        with pytest.raises(CredentialStoreError):
            await users.count()
        with pytest.raises(CredentialStoreError):
            await AuditLogRepository(database).list_for_user(uuid4())


class TestAuditLogRepository:
    """Tests for AuditLogRepository."""

    async def test_append_and_list(
        self, users: UserRepository, logs: AuditLogRepository
    ) -> None:
        """Entries are stored per user, oldest first."""
        user = await users.create("Ada", "ada@example.com", "hashed")

        await logs.append(user.id, "first")
        await logs.append(user.id, "second")

        entries = await logs.list_for_user(user.id)
        assert [e.description for e in entries] == ["first", "second"]
        assert all(e.user_id == user.id for e in entries)

    async def test_append_for_unknown_user_fails(
        self, logs: AuditLogRepository
    ) -> None:
        """A log entry must reference an existing user."""
        with pytest.raises(CredentialStoreError):
            await logs.append(uuid4(), "orphan")


class TestPasswordHashing:
    """Tests for password hashing utilities."""

    def test_hash_password(self) -> None:
        """Should hash password."""
        hashed = hash_password("Abcdef1!", rounds=TEST_ROUNDS)

        assert hashed != "Abcdef1!"
        assert hashed.startswith("$2")  # bcrypt prefix

    def test_default_cost_factor_is_14(self) -> None:
        """The default cost factor is encoded in the hash."""
        from passgate.modules.auth.password import DEFAULT_ROUNDS

        assert DEFAULT_ROUNDS == 14

    def test_rounds_are_encoded(self) -> None:
        """The cost factor is part of the hash."""
        assert hash_password("Abcdef1!", rounds=5).startswith("$2b$05$")

    def test_verify_password_correct(self) -> None:
        """Should verify correct password."""
        hashed = hash_password("Abcdef1!", rounds=TEST_ROUNDS)
        assert verify_password("Abcdef1!", hashed)

    def test_verify_password_incorrect(self) -> None:
        """Should reject incorrect password."""
        hashed = hash_password("Abcdef1!", rounds=TEST_ROUNDS)
        assert not verify_password("Abcdef1?", hashed)
        assert not verify_password("", hashed)

    def test_verify_malformed_hash(self) -> None:
        """Malformed hashes never match."""
        assert not verify_password("Abcdef1!", "not-a-bcrypt-hash")

    def test_different_hashes_for_same_password(self) -> None:
        """Should generate different hashes due to salt."""
        hash1 = hash_password("Abcdef1!", rounds=TEST_ROUNDS)
        hash2 = hash_password("Abcdef1!", rounds=TEST_ROUNDS)

        assert hash1 != hash2
        assert verify_password("Abcdef1!", hash1)
        assert verify_password("Abcdef1!", hash2)

    def test_long_password(self) -> None:
        """Passwords beyond bcrypt's input limit can still be hashed."""
        password = "Aa1!" * 40
        hashed = hash_password(password, rounds=TEST_ROUNDS)
        assert verify_password(password, hashed)


class TestTokenIssuer:
    """Tests for TokenIssuer."""

    def _user(self) -> User:
        now = datetime.now(timezone.utc)
        return User(
            id=uuid4(),
            name="Ada",
            email="ada@example.com",
            hashed_password="hashed",
            created_at=now,
            updated_at=now,
        )

    def test_issue_and_decode(self, tokens: TokenIssuer) -> None:
        """Claims carry the user ID and name."""
        user = self._user()

        issued = tokens.issue(user)
        payload = tokens.decode(issued.token)

        assert payload.sub == str(user.id)
        assert payload.name == "Ada"
        assert issued.expires_in == 3600
        assert (payload.exp - payload.iat).total_seconds() == 3600

    def test_expired_token(self) -> None:
        """Expired tokens are rejected."""
        issuer = TokenIssuer(TEST_SECRET, expire_hours=-1)
        issued = issuer.issue(self._user())

        with pytest.raises(AuthenticationError, match="Token has expired"):
            issuer.decode(issued.token)

    def test_wrong_secret(self, tokens: TokenIssuer) -> None:
        """Tokens signed with another key are rejected."""
        token = TokenIssuer("another-secret-key-for-tests-only").issue(self._user())

        with pytest.raises(AuthenticationError, match="Invalid token"):
            tokens.decode(token.token)

    def test_garbage_token(self, tokens: TokenIssuer) -> None:
        """Should reject invalid token."""
        with pytest.raises(AuthenticationError, match="Invalid token"):
            tokens.decode("invalid.token.here")

    def test_from_settings(self) -> None:
        """Settings provide the secret and lifetime."""
        settings = Settings(
            _env_file=None,
            jwt_secret_key=TEST_SECRET,
            jwt_expire_hours=2,
        )
        issuer = TokenIssuer.from_settings(settings)
        issued = issuer.issue(self._user())

        decoded = jwt.decode(issued.token, TEST_SECRET, algorithms=["HS256"])
        assert decoded["exp"] - decoded["iat"] == 7200

    def test_from_settings_requires_secret(self) -> None:
        """A missing secret is a configuration error."""
        with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
            TokenIssuer.from_settings(Settings(_env_file=None, jwt_secret_key=None))


class TestRegister:
    """Tests for AuthService.register."""

    async def test_register_user(
        self, auth_service: AuthService, users: UserRepository
    ) -> None:
        """Should store a hash that verifies only the original password."""
        user = await auth_service.register("Ada", "Ada@Example.com", "Abcdef1!")

        assert user.name == "Ada"
        assert user.email == "ada@example.com"

        stored = await users.get_by_id(user.id)
        assert stored is not None
        assert stored.hashed_password != "Abcdef1!"
        assert verify_password("Abcdef1!", stored.hashed_password)
        assert not verify_password("Abcdef1?", stored.hashed_password)

    async def test_register_weak_password(
        self, auth_service: AuthService, users: UserRepository
    ) -> None:
        """All violations are reported and nothing is stored."""
        with pytest.raises(PasswordPolicyError) as exc_info:
            await auth_service.register("Ada", "ada@example.com", "Abc!")

        assert exc_info.value.violations == [TOO_SHORT, MISSING_DIGIT]
        assert str(exc_info.value) == f"{TOO_SHORT} | {MISSING_DIGIT}"
        assert await users.count() == 0

    async def test_register_duplicate_email(self, auth_service: AuthService) -> None:
        """A second account with the same email conflicts."""
        await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(UserAlreadyExistsError):
            await auth_service.register("Imposter", "ADA@example.com", "Abcdef1!")


class TestLogin:
    """Tests for AuthService.login."""

    async def test_login(self, auth_service: AuthService, tokens: TokenIssuer) -> None:
        """Should return the user and a token for their ID."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        result = await auth_service.login("ada@example.com", "Abcdef1!")

        assert result.user.id == user.id
        assert result.user.email == "ada@example.com"
        assert result.expires_in == 3600
        payload = tokens.decode(result.token)
        assert payload.sub == str(user.id)
        assert payload.name == "Ada"

    async def test_wrong_password_is_logged(
        self, auth_service: AuthService, logs: AuditLogRepository
    ) -> None:
        """A failed attempt appends one log entry."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await auth_service.login("ada@example.com", "wrong_password")

        entries = await logs.list_for_user(user.id)
        assert [e.description for e in entries] == ["Failed attempt to login in"]

    async def test_unknown_email_matches_wrong_password(
        self, auth_service: AuthService
    ) -> None:
        """Unknown emails and wrong passwords are indistinguishable."""
        await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(AuthenticationError) as wrong_password:
            await auth_service.login("ada@example.com", "Wrong1!xx")
        with pytest.raises(AuthenticationError) as unknown_email:
            await auth_service.login("nobody@example.com", "Abcdef1!")

        assert str(wrong_password.value) == str(unknown_email.value)

    async def test_unknown_email_still_checks_a_hash(
        self, auth_service: AuthService
    ) -> None:
        """An unknown email pays for one bcrypt check like a known one."""
        with patch(
            "passgate.modules.auth.service.verify_password", wraps=verify_password
        ) as spy:
            with pytest.raises(AuthenticationError):
                await auth_service.login("nobody@example.com", "Abcdef1!")

        spy.assert_called_once()
        assert spy.call_args.args[0] == "Abcdef1!"

    async def test_store_failure_is_not_auth_error(
        self, logs: AuditLogRepository, tokens: TokenIssuer
    ) -> None:
        """Store faults propagate as CredentialStoreError."""
        users = AsyncMock(spec=UserRepository)
        users.get_by_email.side_effect = CredentialStoreError("get_user_by_email", "boom")
        service = AuthService(users, logs, tokens, bcrypt_rounds=TEST_ROUNDS)

        with pytest.raises(CredentialStoreError):
            await service.login("ada@example.com", "Abcdef1!")


class TestChangePassword:
    """Tests for AuthService.change_password."""

    async def test_change_password(
        self,
        auth_service: AuthService,
        users: UserRepository,
        logs: AuditLogRepository,
    ) -> None:
        """The new hash replaces the old one and the change is logged once."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        await auth_service.change_password("ada@example.com", "Abcdef1!", "Newpass1$")

        stored = await users.get_by_id(user.id)
        assert stored is not None
        assert verify_password("Newpass1$", stored.hashed_password)
        assert not verify_password("Abcdef1!", stored.hashed_password)

        entries = await logs.list_for_user(user.id)
        assert [e.description for e in entries] == ["Password changed successfully"]

        result = await auth_service.login("ada@example.com", "Newpass1$")
        assert result.user.id == user.id

    async def test_unknown_user(self, auth_service: AuthService) -> None:
        """Unknown emails raise UserNotFoundError."""
        with pytest.raises(UserNotFoundError, match="User not found"):
            await auth_service.change_password(
                "nobody@example.com", "Abcdef1!", "Newpass1$"
            )

    async def test_incorrect_current_password(
        self,
        auth_service: AuthService,
        users: UserRepository,
        logs: AuditLogRepository,
    ) -> None:
        """The hash is unchanged and nothing is logged."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(IncorrectPasswordError, match="Incorrect current password"):
            await auth_service.change_password(
                "ada@example.com", "Wrong1!xx", "Newpass1$"
            )

        stored = await users.get_by_id(user.id)
        assert stored is not None
        assert verify_password("Abcdef1!", stored.hashed_password)
        assert await logs.list_for_user(user.id) == []

    async def test_current_password_checked_before_policy(
        self, auth_service: AuthService
    ) -> None:
        """A wrong current password wins over a weak new one."""
        await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(IncorrectPasswordError):
            await auth_service.change_password("ada@example.com", "Wrong1!xx", "weak")

    async def test_weak_new_password(
        self,
        auth_service: AuthService,
        users: UserRepository,
        logs: AuditLogRepository,
    ) -> None:
        """A weak new password is rejected with every violation."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        with pytest.raises(PasswordPolicyError) as exc_info:
            await auth_service.change_password("ada@example.com", "Abcdef1!", "short")

        assert TOO_SHORT in exc_info.value.violations
        stored = await users.get_by_id(user.id)
        assert stored is not None
        assert verify_password("Abcdef1!", stored.hashed_password)
        assert await logs.list_for_user(user.id) == []

    async def test_concurrent_changes_keep_one_hash(
        self, auth_service: AuthService, users: UserRepository
    ) -> None:
        """Racing changes leave exactly one of the submitted passwords."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")

        results = await asyncio.gather(
            auth_service.change_password("ada@example.com", "Abcdef1!", "Newpass1$"),
            auth_service.change_password("ada@example.com", "Abcdef1!", "Other2#pw"),
            return_exceptions=True,
        )

        assert any(r is None for r in results)
        assert all(r is None or isinstance(r, IncorrectPasswordError) for r in results)

        stored = await users.get_by_id(user.id)
        assert stored is not None
        matches = [
            verify_password(candidate, stored.hashed_password)
            for candidate in ("Newpass1$", "Other2#pw")
        ]
        assert matches.count(True) == 1


class TestGetCurrentUser:
    """Tests for AuthService.get_current_user."""

    async def test_resolves_user(self, auth_service: AuthService) -> None:
        """A login token maps back to its user."""
        user = await auth_service.register("Ada", "ada@example.com", "Abcdef1!")
        result = await auth_service.login("ada@example.com", "Abcdef1!")

        current = await auth_service.get_current_user(result.token)

        assert current.id == user.id

    async def test_token_for_missing_user(
        self, auth_service: AuthService, tokens: TokenIssuer
    ) -> None:
        """Tokens for users that do not exist are rejected."""
        now = datetime.now(timezone.utc)
        ghost = User(
            id=uuid4(),
            name="Ghost",
            email="ghost@example.com",
            hashed_password="hashed",
            created_at=now,
            updated_at=now,
        )

        with pytest.raises(AuthenticationError, match="Invalid token"):
            await auth_service.get_current_user(tokens.issue(ghost).token)
