"""JWT token creation and decoding.

Token claims:
  - sub:     user ID
  - role:    user role string
  - type:    "access"
  - iat:     issued-at timestamp
  - iat_ms:  issued-at in unix milliseconds (compared against per-user revocation)
  - exp:     expiry timestamp
"""

import time
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from fotolokashen.config import settings

ALGORITHM = settings.jwt_algorithm


def now_ms() -> int:
    return int(time.time() * 1000)


def token_lifetime(remember_me: bool = False) -> timedelta:
    days = settings.remember_me_expire_days if remember_me else settings.access_token_expire_days
    return timedelta(days=days)


def create_access_token(
    user_id: str,
    role: str,
    remember_me: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or token_lifetime(remember_me))
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "iat": now,
        "iat_ms": int(now.timestamp() * 1000),
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}
