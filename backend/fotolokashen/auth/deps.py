"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_request_token      → raw JWT from the Bearer header or auth cookie
  get_current_user       → decode JWT, load user from DB, return User
  require_role(...)      → restrict to specific roles
  require_permission(...) → restrict to users passing a permission predicate

Every request re-derives the user; nothing is cached between requests.
"""

from typing import Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.auth.jwt import decode_token
from fotolokashen.auth.revocation import TokenRevocation
from fotolokashen.config import settings
from fotolokashen.database import get_db
from fotolokashen.models.user import User, UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ── Token extraction ────────────────────────────────────────

async def get_request_token(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
) -> str | None:
    """Header wins over cookie; browsers send the cookie, API clients the header."""
    return bearer or request.cookies.get(settings.auth_cookie_name)


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str | None = Depends(get_request_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the request to an active user or raise 401."""
    if not token:
        raise _unauthorized("Unauthorized")

    payload = decode_token(token)
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise _unauthorized("Invalid or expired token")

    if await TokenRevocation.is_revoked(token):
        raise _unauthorized("Token has been revoked")

    # Password reset revokes everything issued before it
    if await TokenRevocation.is_user_revoked(user_id, payload.get("iat_ms")):
        raise _unauthorized("Session expired. Please log in again.")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise _unauthorized("User not found or inactive")

    return user


# ── Role-based access control ───────────────────────────────

def require_role(*roles: UserRole):
    """Dependency factory: restrict to one or more roles.

    Usage:
        @router.get("/staff-only")
        async def staff_view(user: User = Depends(require_role(UserRole.STAFFER))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _check


def require_permission(check: Callable[[User], bool], detail: str = "Permission denied"):
    """Dependency factory: restrict to users passing a predicate from auth.permissions.

    Usage:
        @router.get("/users")
        async def list_users(user: User = Depends(require_permission(can_view_user_management))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        if not check(user):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return _check
