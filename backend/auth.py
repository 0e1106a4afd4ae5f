import bcrypt
from datetime import datetime, timedelta, timezone
from jose import ExpiredSignatureError, JWTError, jwt

from config import settings
from errors import AuthenticationError

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    pwd_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(pwd_bytes, bcrypt.gensalt())
    return hashed.decode("utf-8")  # Store as string in MongoDB


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_in or timedelta(hours=settings.jwt_expire_hours))
    return jwt.encode({"sub": user_id, "exp": expire}, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """Return the subject (user id) of a signed token.

    Expired and otherwise invalid tokens are reported with distinct messages
    so the client can tell a stale session from a broken one.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired.")
    except JWTError:
        raise AuthenticationError("Invalid token.")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token.")
    return user_id
