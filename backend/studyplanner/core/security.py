from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from studyplanner.core.config import get_settings


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """Mint an identity token the way the auth provider does (local tooling and tests)."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode: Dict[str, Any] = {
        "sub": str(subject),
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(
        to_encode, settings.auth_secret_key, algorithm=settings.auth_algorithm
    )


def decode_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
