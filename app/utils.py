import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from .config import settings


# =========================
# JWT Token Handling
# =========================
def create_jwt_token(data: dict, expires_minutes: Optional[int] = None):
    """Create JWT access token with expiration"""
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})

    # Ensure SECRET_KEY is properly set
    if not settings.SECRET_KEY or settings.SECRET_KEY == "change-me-in-prod":
        raise ValueError("SECRET_KEY not properly configured")

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def decode_jwt_token(token: str):
    """Decode and verify JWT token"""
    # Ensure SECRET_KEY is properly set
    if not settings.SECRET_KEY or settings.SECRET_KEY == "change-me-in-prod":
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != "access":
        return None
    return payload


# =========================
# Date helpers
# =========================
def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC; convert aware values, pass naive ones through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
