from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError

from chat_api.config import Settings
from chat_api.exceptions import Unauthorized

# Argon2 generates a random salt per hash and verifies in constant time
password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(stored_hash: str, candidate: str) -> bool:
    """Return True if ``candidate`` matches ``stored_hash``."""
    try:
        return password_hasher.verify(stored_hash, candidate)
    except (VerifyMismatchError, InvalidHashError):
        return False


def create_access_token(user_id: str, settings: Settings) -> str:
    """Signed token carrying the user id, valid for ACCESS_TOKEN_EXPIRE_MINUTES."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> str:
    """
    Verify a token and return the user id it carries.

    Raises:
        Unauthorized: if the token is expired, malformed or badly signed
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise Unauthorized(f"Invalid token: {str(e)}")
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token: missing subject")
    return user_id
