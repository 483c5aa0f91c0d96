"""Password hashing and JWT helpers."""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from app.config import settings


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh bcrypt salt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string

    Example:
        >>> hash_password("Password123!").startswith("$2b$")
        True
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plain password against a stored bcrypt hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hash stored at registration

    Returns:
        True if password matches hash, False otherwise

    Example:
        >>> hashed = hash_password("Password123!")
        >>> verify_password("Password123!", hashed)
        True
        >>> verify_password("password123!", hashed)
        False
    """
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def token_expiry(expires_delta: Optional[timedelta] = None) -> datetime:
    """
    Expiry time for a token issued now.

    Args:
        expires_delta: Token lifetime, defaults to the configured minutes

    Returns:
        Timezone-aware UTC expiry time
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expiration_minutes)
    return datetime.now(timezone.utc) + expires_delta


def create_access_token(user_id: str, expires_at: Optional[datetime] = None) -> str:
    """
    Create a signed JWT whose subject is the user ID.

    Args:
        user_id: User ID to encode in token
        expires_at: Expiry time, defaults to the configured lifetime

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(user_id="user123")
        >>> isinstance(token, str)
        True
    """
    claims = {
        "sub": user_id,
        "exp": expires_at or token_expiry(),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> str:
    """
    Decode a JWT and return the user ID it was issued for.

    Args:
        token: JWT token string to verify

    Returns:
        User ID from the token's subject

    Raises:
        JWTError: If token is invalid, expired, or has no subject

    Example:
        >>> verify_access_token(create_access_token(user_id="user123"))
        'user123'
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token payload missing 'sub' claim")
    return user_id
