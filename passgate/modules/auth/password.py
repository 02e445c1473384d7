"""Password hashing with bcrypt."""

import bcrypt

DEFAULT_ROUNDS = 14

# bcrypt only consumes the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with a fresh bcrypt salt.

    Args:
        password: Plain text password.
        rounds: bcrypt cost factor.

    Returns:
        The encoded bcrypt hash.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a password against a bcrypt hash in constant time.

    Malformed hashes never match.
    """
    try:
        return bcrypt.checkpw(_encode(password), hashed_password.encode("utf-8"))
    except ValueError:
        return False
