"""Staff-only views onto other users: onboarding progress and roles.

Endpoints:
    GET   /api/admin/users/{user_id}/onboarding        Onboarding progress of a user
    POST  /api/admin/users/{user_id}/onboarding/reset  Put a user back to not started
    POST  /api/admin/users/{user_id}/verification      Send a fresh verification link
    PATCH /api/admin/users/{user_id}/role              Change a user's role (super admins only)
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.auth.deps import require_permission, require_role
from fotolokashen.auth.permissions import (
    can_resend_verification_emails,
    can_view_user_management,
)
from fotolokashen.config import settings
from fotolokashen.database import get_db
from fotolokashen.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from fotolokashen.models.security_log import SecurityEvent
from fotolokashen.models.user import User, UserRole
from fotolokashen.routers.auth import build_user_out
from fotolokashen.routers.onboarding import make_progress
from fotolokashen.schemas.auth import RoleUpdate, UserOut, VerificationSentResponse
from fotolokashen.schemas.onboarding import OnboardingProgress
from fotolokashen.services import onboarding as tracker
from fotolokashen.services import verification
from fotolokashen.services.users import get_user
from fotolokashen.utils.security_log import log_security_event
from fotolokashen.utils.user_agent import client_ip, request_user_agent

logger = logging.getLogger(__name__)

router = APIRouter()

require_staff = require_permission(can_view_user_management, "Staff access required")
require_verification_staff = require_permission(
    can_resend_verification_emails, "Staff access required"
)
require_super_admin = require_role(UserRole.SUPER_ADMIN)


async def _load_target(db: AsyncSession, user_id: str) -> User:
    target = await get_user(db, user_id)
    if not target:
        raise ResourceNotFoundError("User", user_id)
    return target


@router.get("/users/{user_id}/onboarding", response_model=OnboardingProgress)
async def get_user_onboarding(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff),
):
    return make_progress(await _load_target(db, user_id))


@router.post("/users/{user_id}/onboarding/reset", response_model=OnboardingProgress)
async def reset_user_onboarding(
    user_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff),
):
    """Reset a user's tour so it shows again on their next visit.

    The audit row goes on the target's log and is committed with the reset.
    """
    target = await _load_target(db, user_id)
    log_security_event(
        db,
        target.id,
        SecurityEvent.ONBOARDING_RESET_BY_ADMIN,
        ip_address=client_ip(request),
        user_agent=request_user_agent(request),
        details={"staff_id": staff.id},
    )
    await tracker.reset_onboarding(db, target)
    return make_progress(target)


@router.post("/users/{user_id}/verification", response_model=VerificationSentResponse)
async def resend_verification(
    user_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_verification_staff),
):
    """Replace the user's verification link. Staff are not held to the resend cooldown."""
    target = await _load_target(db, user_id)
    if target.email_verified:
        raise BusinessLogicError("Email is already verified", "ALREADY_VERIFIED")

    token = verification.issue_verification_token(target)
    log_security_event(
        db,
        target.id,
        SecurityEvent.VERIFICATION_EMAIL_SENT,
        ip_address=client_ip(request),
        user_agent=request_user_agent(request),
        details={"staff_id": staff.id},
    )
    await db.commit()

    result = VerificationSentResponse(message=f"Verification link sent to {target.email}")
    if settings.environment == "development":
        result.dev_token = token
    return result


@router.patch("/users/{user_id}/role", response_model=UserOut)
async def change_user_role(
    user_id: str,
    body: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin),
):
    """Promote or demote a user. Admins cannot change their own role."""
    target = await _load_target(db, user_id)
    if target.id == admin.id:
        raise BusinessLogicError("You cannot change your own role", "SELF_ROLE_CHANGE")

    previous = target.role
    if previous != body.role:
        target.role = body.role
        log_security_event(
            db,
            target.id,
            SecurityEvent.ROLE_CHANGED,
            ip_address=client_ip(request),
            user_agent=request_user_agent(request),
            details={"admin_id": admin.id, "from": previous.value, "to": body.role.value},
        )
        await db.commit()
        logger.info(
            "User %s role changed %s -> %s by %s",
            target.id, previous.value, body.role.value, admin.id,
        )
    return build_user_out(target)
