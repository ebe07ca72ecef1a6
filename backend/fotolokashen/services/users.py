"""User record access.

`update_user_fields` is the single write path onboarding goes through:
one UPDATE against one row, committed immediately. Concurrent writers
for the same user are not coordinated; the last commit wins.
"""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.models.user import User


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(
        select(User).where(func.lower(User.username) == username.lower())
    )
    return result.scalar_one_or_none()


async def update_user_fields(
    db: AsyncSession,
    user_id: str,
    *,
    commit: bool = True,
    **fields,
) -> None:
    """Write `fields` onto the user row.

    Raises whatever SQLAlchemy raises; callers decide how to report it.
    Anything already pending in the session is committed along with it.
    """
    await db.execute(update(User).where(User.id == user_id).values(**fields))
    if commit:
        await db.commit()
