"""Public profile lookup.

`/@<username>` is rewritten to `/<username>` by VanityURLMiddleware and
lands here. Registered last so fixed paths always win.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.database import get_db
from fotolokashen.middleware.exceptions import ResourceNotFoundError
from fotolokashen.schemas.auth import PublicProfile
from fotolokashen.services.users import get_user_by_username

router = APIRouter(tags=["profiles"])


@router.get("/{username}", response_model=PublicProfile)
async def public_profile(username: str, db: AsyncSession = Depends(get_db)):
    user = await get_user_by_username(db, username)
    if not user or not user.is_active:
        raise ResourceNotFoundError("User", username)
    return PublicProfile.model_validate(user)
