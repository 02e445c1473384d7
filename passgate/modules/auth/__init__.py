"""Authentication module: password policy, users, and bearer tokens."""

from passgate.modules.auth.exceptions import (
    AuthenticationError,
    AuthModuleError,
    CredentialStoreError,
    IncorrectPasswordError,
    PasswordPolicyError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from passgate.modules.auth.models import LogEntry, User
from passgate.modules.auth.password import hash_password, verify_password
from passgate.modules.auth.policy import validate_password
from passgate.modules.auth.repository import AuditLogRepository, UserRepository
from passgate.modules.auth.service import AuthService, LoginResult
from passgate.modules.auth.tokens import IssuedToken, TokenIssuer

__all__ = [
    "AuditLogRepository",
    "AuthModuleError",
    "AuthService",
    "AuthenticationError",
    "CredentialStoreError",
    "IncorrectPasswordError",
    "IssuedToken",
    "LogEntry",
    "LoginResult",
    "PasswordPolicyError",
    "TokenIssuer",
    "User",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "UserRepository",
    "hash_password",
    "validate_password",
    "verify_password",
]
