"""Password hashing and JWT tokens.

Access tokens carry the user's role so clients can gate admin screens
without a round trip; the server still loads the user on every request.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from reelbook.core.config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(user_id: int, token_type: str, lifetime: timedelta, **claims) -> str:
    payload = {"sub": str(user_id), "type": token_type, "exp": datetime.now(UTC) + lifetime, **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: int, role: str = "customer") -> str:
    return _encode(user_id, ACCESS, timedelta(minutes=settings.access_token_expire_minutes), role=role)


def create_refresh_token(user_id: int) -> str:
    return _encode(user_id, REFRESH, timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def read_token(token: str, expected_type: str) -> int:
    """Return the user id from a token of ``expected_type``.

    Raises JWTError for bad signatures, expiry, the wrong token type or a
    subject that is not a user id.
    """
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected {expected_type} token")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise JWTError("Token subject is not a user id") from None
