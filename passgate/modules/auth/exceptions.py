"""Authentication exceptions."""


class AuthModuleError(Exception):
    """Base exception for authentication operations."""

    pass


class PasswordPolicyError(AuthModuleError):
    """Raised when a password does not satisfy the strength policy."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__(" | ".join(self.violations))


class AuthenticationError(AuthModuleError):
    """Raised when authentication fails."""

    pass


class UserNotFoundError(AuthModuleError):
    """Raised when no user exists for the given email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("User not found")


class IncorrectPasswordError(AuthModuleError):
    """Raised when the current password does not match."""

    def __init__(self) -> None:
        super().__init__("Incorrect current password")


class UserAlreadyExistsError(AuthModuleError):
    """Raised when a user with the same email already exists."""

    def __init__(self, email: str, reason: str) -> None:
        self.email = email
        self.reason = reason
        super().__init__(f"User with email {email} already exists: {reason}")


class CredentialStoreError(AuthModuleError):
    """Raised when the credential store fails unexpectedly."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Credential store failure during {operation}: {reason}")
