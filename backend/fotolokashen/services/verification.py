"""Email verification tokens.

Only the SHA-256 of an issued token is stored on the user. Delivery is
the email service's job; callers get the plain token back to hand on,
or in development to return as `dev_token`.
"""

import hashlib
import math
import secrets
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.config import settings
from fotolokashen.models.user import User


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_lapsed(user: User, now: datetime) -> bool:
    """No token issued yet, or the last one has expired."""
    return not user.verification_token_expiry or user.verification_token_expiry < now


def resend_wait_seconds(user: User, now: datetime) -> int:
    """Seconds until another verification email may go out; 0 when it may go now."""
    if not user.last_verification_email_sent_at:
        return 0
    ready_at = user.last_verification_email_sent_at + timedelta(
        minutes=settings.verification_resend_cooldown_minutes
    )
    return max(0, math.ceil((ready_at - now).total_seconds()))


def issue_verification_token(user: User, now: datetime | None = None) -> str:
    """Replace any outstanding token on `user` and return the new plain token.

    Not committed here.
    """
    now = now or datetime.utcnow()
    token = secrets.token_urlsafe(32)
    user.verification_token = hash_token(token)
    user.verification_token_expiry = now + timedelta(
        minutes=settings.verification_token_expire_minutes
    )
    user.last_verification_email_sent_at = now
    return token


async def get_user_by_verification_token(db: AsyncSession, token: str) -> User | None:
    """The unverified user holding `token`, expired or not."""
    result = await db.execute(
        select(User).where(
            User.verification_token == hash_token(token),
            User.email_verified.is_(False),
        )
    )
    return result.scalar_one_or_none()


def mark_verified(user: User) -> None:
    user.email_verified = True
    user.verification_token = None
    user.verification_token_expiry = None
