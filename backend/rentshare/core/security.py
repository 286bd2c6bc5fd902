# rentshare/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt, JWTError
from passlib.context import CryptContext

from rentshare.core.config import settings

# --------------------------------------
# Password hashing config
# --------------------------------------
# pbkdf2_sha256 has no 72-byte input limit
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# --------------------------------------
# Token creation helpers
# --------------------------------------

def _create_token(
    data: Dict[str, Any],
    expires_delta: timedelta,
    *,
    secret_key: str,
    token_type: str,
) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update(
        {
            "iat": now,
            "exp": now + expires_delta,
            "type": token_type,
        }
    )
    return jwt.encode(to_encode, secret_key, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: Dict[str, Any]) -> str:
    expire = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(
        data=data,
        expires_delta=expire,
        secret_key=settings.JWT_SECRET_KEY,
        token_type="access",
    )


def create_refresh_token(data: Dict[str, Any]) -> str:
    expire = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(
        data=data,
        expires_delta=expire,
        secret_key=settings.JWT_REFRESH_SECRET_KEY,
        token_type="refresh",
    )


# --------------------------------------
# Token verification helpers
# --------------------------------------

def decode_refresh_token(token: str) -> Dict[str, Any]:
    """
    Decode a refresh token; raises JWTError if it is not one.
    """
    payload = jwt.decode(
        token,
        settings.JWT_REFRESH_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
    )
    if payload.get("type") != "refresh":
        raise JWTError("Not a refresh token")
    return payload


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate an *access* token.
    Used by get_current_user.
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
    )

    if payload.get("type") != "access":
        raise JWTError("Invalid token type")

    if "email" not in payload:
        raise JWTError("Missing email in token")

    return payload
