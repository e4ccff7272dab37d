from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import secrets

from helpers.errors import ValidationError


ph = PasswordHasher()

MIN_PASSWORD_LENGTH = 6
OTP_LIFETIME = timedelta(minutes=10)
RESET_TOKEN_LIFETIME = timedelta(minutes=30)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def otp_expiry() -> datetime:
    return utcnow() + OTP_LIFETIME


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def reset_token_expiry() -> datetime:
    return utcnow() + RESET_TOKEN_LIFETIME


def is_expired(expires_at: Optional[datetime]) -> bool:
    if expires_at is None:
        return True
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return utcnow() > expires_at


def validate_new_password(password: str, confirm_password: str, mismatch_message: str = "Passwords do not match"):
    """Rules every password-accepting endpoint applies before hashing."""
    if password != confirm_password:
        raise ValidationError(mismatch_message)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
