"""Security related functions."""

import secrets

import bcrypt

TOKEN_BYTES = 32
# bcrypt only reads this many bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt.

    Raises ValueError for passwords longer than ``MAX_PASSWORD_BYTES``.
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError("password cannot be longer than 72 bytes")
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash.

    A malformed stored hash or an over-long password counts as a mismatch.
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_token() -> str:
    """Return a new opaque session token."""
    return secrets.token_urlsafe(TOKEN_BYTES)
