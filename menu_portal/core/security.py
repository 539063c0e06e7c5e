"""Password hashing and JWT helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.security import HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_signed_token(
    data: dict[str, Any],
    *,
    secret: str,
    algorithm: str,
    expires_minutes: int,
    audience: str | None = None,
) -> str:
    """Create a signed JWT carrying ``data`` plus ``iat``/``exp`` claims."""
    to_encode: dict[str, Any] = data.copy()
    now: datetime = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + timedelta(minutes=expires_minutes)})
    if audience is not None:
        to_encode["aud"] = audience
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_signed_token(
    token: str,
    *,
    secret: str,
    algorithm: str,
    audience: str | None = None,
) -> dict[str, Any] | None:
    """Decode a JWT, returning ``None`` when the signature, audience or expiry is invalid."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError:
        return None
    return payload
