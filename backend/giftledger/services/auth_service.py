# Overview: Password hashing and credential checks for holders.

"""
Authentication helpers.

Uses bcrypt for password hashing and validates password strength.
Session tokens are managed separately (see session_service.py).
"""
from __future__ import annotations

import re

import bcrypt

from ..exceptions import ValidationError
from ..models import Dataset, Holder


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    code = "weak_password"


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter, one lowercase letter, one digit
    - At least one special character
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        raise PasswordValidationError("Password must contain at least one digit")
    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str, *, rounds: int = 12) -> str:
    """Hash a password with bcrypt after checking its strength."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def authenticate(data: Dataset, username: str, password: str) -> Holder | None:
    """Return the active holder matching the credentials, or None."""
    holder = data.holder_by_username(username)
    if holder is None or not holder.is_active:
        return None
    if not verify_password(password, holder.password_hash):
        return None
    return holder
