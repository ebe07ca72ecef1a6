"""JWT token revocation using a Redis blacklist.

Two kinds of entries:
  - revoked:<token>       single token, set on logout
  - revoked:user:<id>     unix time in ms; every token issued up to it is dead
                          (password reset)

Entries expire on their own once the tokens they cover would have.
"""

import logging
import time

from fotolokashen.auth.jwt import now_ms, token_lifetime
from fotolokashen.utils.cache import get_redis

logger = logging.getLogger(__name__)


class TokenRevocation:
    """Manage JWT token revocation with Redis."""

    @staticmethod
    async def revoke_token(token: str, expires_at: float) -> bool:
        """Add token to revocation list until its natural expiry.

        Returns:
            True if successfully revoked (or already expired)
        """
        ttl = int(expires_at - time.time())
        if ttl <= 0:
            return True

        redis_client = await get_redis()
        try:
            await redis_client.setex(f"revoked:{token}", ttl, str(int(time.time())))
            return True
        except Exception:
            logger.exception("Failed to revoke token")
            return False

    @staticmethod
    async def is_revoked(token: str) -> bool:
        redis_client = await get_redis()
        try:
            exists = await redis_client.exists(f"revoked:{token}")
            return exists > 0
        except Exception:
            logger.exception("Failed to check token revocation")
            # Fail closed
            return True

    @staticmethod
    async def revoke_all_user_tokens(user_id: str) -> bool:
        """Invalidate every token issued to the user up to now.

        Kept for the longest possible token lifetime so no older token
        can outlive the marker.
        """
        redis_client = await get_redis()
        duration = int(token_lifetime(remember_me=True).total_seconds())
        try:
            await redis_client.setex(
                f"revoked:user:{user_id}",
                duration,
                str(now_ms()),
            )
            return True
        except Exception:
            logger.exception("Failed to revoke tokens for user %s", user_id)
            return False

    @staticmethod
    async def is_user_revoked(user_id: str, issued_at_ms: int | None) -> bool:
        """Check whether a token issued at `issued_at_ms` (unix ms) predates a user-wide revocation.

        A token issued in the same millisecond as the revocation counts as revoked.
        Tokens without the millisecond claim are revoked whenever a marker exists.
        """
        redis_client = await get_redis()
        try:
            revoked_at = await redis_client.get(f"revoked:user:{user_id}")
        except Exception:
            logger.exception("Failed to check user revocation")
            return True
        if revoked_at is None:
            return False
        if issued_at_ms is None:
            return True
        return int(issued_at_ms) <= int(revoked_at)
