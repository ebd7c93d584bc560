"""
Authentication utilities for JWT token management and password hashing.
Provides JWT token generation, validation, and role-based claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, TYPE_CHECKING
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext
from rental_api.config import settings
from rental_api.models.user import UserRole
from rental_api.utils.exceptions import InvalidTokenError, TokenExpiredError
import uuid

if TYPE_CHECKING:
    from rental_api.models.user import User


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: str, email: str, role: str, exp: datetime):
        self.user_id = user_id
        self.email = email
        self.role = role
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=data["sub"],
            email=data["email"],
            role=data["role"],
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT access token with user claims.

    Args:
        user_id: User's UUID
        email: User's email address
        role: User's role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "exp": expire,
        "iat": now,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "type": "access"
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def generate_token(user: "User") -> str:
    """Issue an access token for a user entity."""
    return create_access_token(user.id, user.email, user.role)


def verify_token(token: str) -> TokenPayload:
    """
    Verify and decode JWT access token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the signature, issuer, audience or claims are wrong
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}")

    if payload.get("type") != "access":
        raise InvalidTokenError("Invalid token type")

    if not payload.get("sub") or not payload.get("email") or not payload.get("role"):
        raise InvalidTokenError("Invalid token payload")

    try:
        uuid.UUID(payload["sub"])
        UserRole(payload["role"])
    except ValueError:
        raise InvalidTokenError("Invalid token payload")

    return TokenPayload.from_dict(payload)


def validate_token(token: str) -> bool:
    """
    Check a token without raising.

    Args:
        token: JWT token string

    Returns:
        True if the token verifies, False otherwise
    """
    try:
        verify_token(token)
        return True
    except (InvalidTokenError, TokenExpiredError):
        return False


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string

    Raises:
        ValueError: If password is too short
    """
    if not password or len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)
