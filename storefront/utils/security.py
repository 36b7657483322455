# storefront/utils/security.py
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.utils.settings import ACCESS_TOKEN_TTL_MINUTES, SESSION_SECRET

JWT_ALG = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: int, expires_minutes: int = ACCESS_TOKEN_TTL_MINUTES) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode({"sub": str(user_id), "exp": expire}, SESSION_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> int | None:
    """User id carried by a valid token, None for anything else."""
    try:
        payload = jwt.decode(token, SESSION_SECRET, algorithms=[JWT_ALG])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        return None
