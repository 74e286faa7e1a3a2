"""
Security utilities for password hashing and JWT token management.

Default hashing uses ``pbkdf2_sha256`` for stable cross-platform behavior in
tests and local development. ``bcrypt`` verification is still supported for
hashes created by older deployments.
"""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import UnauthorizedError
from app.core.permissions import Role
from app.schemas.token import TokenClaims

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def create_access_token(
    subject: str,
    role: Role | str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT carrying the user id and role.

    Args:
        subject: User ID placed in the ``sub`` claim
        role: Role placed in the ``role`` claim
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode = {
        "sub": str(subject),
        "role": Role(role).value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify a JWT and return its typed claims.

    Signature, algorithm and expiry are checked by python-jose; the claim
    shape (id format, known role) is checked by TokenClaims.

    Raises:
        UnauthorizedError: If the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except JWTError:
        raise UnauthorizedError("Invalid token")

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError:
        raise UnauthorizedError("Invalid token claims")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using the configured default scheme.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)
