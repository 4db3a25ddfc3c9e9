import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext

from app.core.config import settings

# PBKDF2 avoids bcrypt backend/version issues and the 72-byte bcrypt input limit.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
SESSION_TOKEN_BYTES = 32  # 256 bits, hex-encoded to 64 chars


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def generate_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def session_expiry(days: int | None = None) -> datetime:
    if days is None:
        days = settings.SESSION_TTL_DAYS
    return datetime.now(timezone.utc) + timedelta(days=days)
