"""Auth routes: login, logout, current user, password reset, security log.

Route overview:
  POST /login            → email + password login, sets the auth cookie
  POST /logout           → revoke the presented token and clear the cookie
  GET  /me               → current user profile + onboarding progress
  POST /forgot-password  → issue a password reset token
  POST /reset-password   → exchange a reset token for a new password
  POST /verify-email     → confirm the email address with a verification token
  GET  /security-logs    → the current user's recent account activity
"""

import hashlib
import logging
import math
import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.auth.deps import get_current_user, get_request_token
from fotolokashen.auth.jwt import create_access_token, decode_token, token_lifetime
from fotolokashen.auth.password import hash_password, verify_password
from fotolokashen.auth.revocation import TokenRevocation
from fotolokashen.config import settings
from fotolokashen.database import get_db
from fotolokashen.middleware.exceptions import EmailNotVerifiedError, FotolokashenException
from fotolokashen.models.security_log import SecurityEvent, SecurityLog
from fotolokashen.models.user import User
from fotolokashen.routers.onboarding import make_progress
from fotolokashen.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ResetPasswordRequest,
    SecurityLogEntry,
    SecurityLogList,
    UserOut,
    VerifyEmailRequest,
)
from fotolokashen.services import verification
from fotolokashen.services.users import get_user_by_email
from fotolokashen.utils.security_log import format_security_log, log_security_event
from fotolokashen.utils.user_agent import client_ip, device_name, request_user_agent

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"
FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a reset link has been sent"


# ── Helpers ──────────────────────────────────────────────────

def build_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar=user.avatar,
        city=user.city,
        country=user.country,
        role=user.role.value,
        is_active=user.is_active,
        email_verified=user.email_verified,
        created_at=user.created_at,
        onboarding=make_progress(user),
    )


def _hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def _set_auth_cookie(response: Response, token: str, remember_me: bool) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=int(token_lifetime(remember_me).total_seconds()),
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        path="/",
    )


async def _email_verification_gate(
    db: AsyncSession, user: User, now: datetime, ip: str, ua: str
) -> None:
    """Stop an unverified user at login.

    A lapsed link is replaced, at most once per cooldown window; a live
    link is left alone.
    """
    details = {"requires_verification": True, "email": user.email}

    if not verification.token_lapsed(user, now):
        raise EmailNotVerifiedError(
            "Please verify your email address before logging in. "
            "Check your inbox for the verification link.",
            details={**details, "token_resent": False},
        )

    wait = verification.resend_wait_seconds(user, now)
    if wait:
        raise EmailNotVerifiedError(
            "Verification email was sent recently. Please check your inbox "
            f"or try again in {_plural(math.ceil(wait / 60), 'minute')}.",
            error_code="EMAIL_RATE_LIMITED",
            details={**details, "retry_after": wait},
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        )

    token = verification.issue_verification_token(user, now)
    log_security_event(
        db, user.id, SecurityEvent.VERIFICATION_EMAIL_SENT, ip_address=ip, user_agent=ua
    )
    await db.commit()

    details["token_resent"] = True
    if settings.environment == "development":
        details["dev_token"] = token
    raise EmailNotVerifiedError(
        "Email not verified. A new verification link has been sent to your email.",
        error_code="EMAIL_NOT_VERIFIED_RESENT",
        details=details,
    )


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Email + password login with account lockout after repeated failures.

    The verification gate runs only once the password is known good, so it
    never tells a stranger whether an address is registered.
    """
    ip = client_ip(request)
    ua = request_user_agent(request)

    user = await get_user_by_email(db, body.email)
    if not user:
        # Same answer as a wrong password so emails can't be enumerated
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    now = datetime.utcnow()
    if user.locked_until and user.locked_until > now:
        minutes_left = max(1, int((user.locked_until - now).total_seconds() // 60) + 1)
        raise HTTPException(
            status_code=429,
            detail=(
                "Account is temporarily locked due to multiple failed login attempts. "
                f"Please try again in {_plural(minutes_left, 'minute')}."
            ),
        )
    if user.locked_until:
        # Lock period is over: start counting afresh
        user.failed_login_attempts = 0
        user.locked_until = None

    if not verify_password(body.password, user.hashed_password):
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        if user.failed_login_attempts >= settings.max_failed_login_attempts:
            user.locked_until = now + timedelta(minutes=settings.lockout_minutes)
            log_security_event(
                db, user.id, SecurityEvent.ACCOUNT_LOCKED, ip_address=ip, user_agent=ua,
                details={"failed_attempts": user.failed_login_attempts},
            )
            await db.commit()
            logger.warning("Account %s locked after %d failed logins", user.id, user.failed_login_attempts)
            raise HTTPException(
                status_code=429,
                detail=(
                    f"Account locked due to {settings.max_failed_login_attempts} failed login attempts. "
                    f"Please try again in {settings.lockout_minutes} minutes."
                ),
            )

        log_security_event(db, user.id, SecurityEvent.LOGIN_FAILED, ip_address=ip, user_agent=ua)
        await db.commit()
        attempts_left = settings.max_failed_login_attempts - user.failed_login_attempts
        raise HTTPException(
            status_code=401,
            detail=(
                f"{INVALID_CREDENTIALS}. {_plural(attempts_left, 'attempt')} "
                "remaining before account lockout."
            ),
        )

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is deactivated")

    if not user.email_verified:
        await _email_verification_gate(db, user, now, ip, ua)

    user.failed_login_attempts = 0
    user.locked_until = None
    user.last_login_at = now
    log_security_event(
        db, user.id, SecurityEvent.LOGIN_SUCCESS, ip_address=ip, user_agent=ua,
        details={"remember_me": body.remember_me, "device_name": device_name(ua)},
    )
    await db.commit()

    token = create_access_token(user.id, user.role.value, remember_me=body.remember_me)
    _set_auth_cookie(response, token, body.remember_me)
    return LoginResponse(user=build_user_out(user), token=token)


# ── POST /logout ─────────────────────────────────────────────

@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    token: str | None = Depends(get_request_token),
    db: AsyncSession = Depends(get_db),
):
    """Works without a valid session; a decodable token is revoked."""
    if token:
        payload = decode_token(token)
        if payload.get("sub") and payload.get("exp"):
            if not await TokenRevocation.revoke_token(token, float(payload["exp"])):
                # Logout still succeeds client-side; the token just lives on until exp
                logger.warning("Logout could not revoke token for user %s", payload["sub"])
            log_security_event(
                db, payload["sub"], SecurityEvent.LOGOUT,
                ip_address=client_ip(request), user_agent=request_user_agent(request),
            )
            await db.commit()

    response.delete_cookie(settings.auth_cookie_name, path="/")
    return MessageResponse(message="Logged out successfully")


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    """Return the current authenticated user's profile and onboarding progress."""
    return build_user_out(user)


# ── POST /forgot-password ────────────────────────────────────

@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Issue a one-hour reset token.

    The response is identical whether or not the email is registered.
    Delivery is handled by the email service; in development (no email)
    the token is returned as `dev_token`.
    """
    result = ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)

    user = await get_user_by_email(db, body.email)
    if not user or not user.is_active:
        return result

    token = secrets.token_urlsafe(32)
    user.password_reset_token_hash = _hash_reset_token(token)
    user.password_reset_expires_at = datetime.utcnow() + timedelta(
        minutes=settings.password_reset_expire_minutes
    )
    log_security_event(
        db, user.id, SecurityEvent.PASSWORD_RESET_REQUESTED,
        ip_address=client_ip(request), user_agent=request_user_agent(request),
    )
    await db.commit()

    if settings.environment == "development":
        result.dev_token = token
    return result


# ── POST /reset-password ─────────────────────────────────────

@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Set a new password from a reset token. Tokens are single use."""
    result = await db.execute(
        select(User).where(User.password_reset_token_hash == _hash_reset_token(body.token))
    )
    user = result.scalar_one_or_none()
    if (
        not user
        or not user.password_reset_expires_at
        or user.password_reset_expires_at < datetime.utcnow()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )

    user.hashed_password = hash_password(body.password)
    user.password_reset_token_hash = None
    user.password_reset_expires_at = None
    user.failed_login_attempts = 0
    user.locked_until = None
    log_security_event(
        db, user.id, SecurityEvent.PASSWORD_RESET,
        ip_address=client_ip(request), user_agent=request_user_agent(request),
    )
    await db.commit()

    # Sessions opened with the old password end here
    await TokenRevocation.revoke_all_user_tokens(user.id)
    return MessageResponse(message="Password has been reset. Please log in.")


# ── POST /verify-email ───────────────────────────────────────

@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    body: VerifyEmailRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Confirm the address with the emailed token. Tokens are single use."""
    user = await verification.get_user_by_verification_token(db, body.token)
    if not user or verification.token_lapsed(user, datetime.utcnow()):
        raise FotolokashenException(
            "Invalid or expired verification token",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="INVALID_TOKEN",
        )

    verification.mark_verified(user)
    log_security_event(
        db, user.id, SecurityEvent.EMAIL_VERIFIED,
        ip_address=client_ip(request), user_agent=request_user_agent(request),
    )
    await db.commit()
    logger.info("Email verified for user %s", user.id)
    return MessageResponse(message="Email verified successfully! You can now login.")


# ── GET /security-logs ───────────────────────────────────────

@router.get("/security-logs", response_model=SecurityLogList)
async def security_logs(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(SecurityLog)
        .where(SecurityLog.user_id == user.id)
        .order_by(SecurityLog.created_at.desc())
        .limit(50)
    )
    logs = [
        SecurityLogEntry(
            id=entry.id,
            event_type=entry.event_type,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            device_type=entry.device_type,
            details=entry.details,
            created_at=entry.created_at,
            display=format_security_log(entry),
        )
        for entry in result.scalars().all()
    ]
    return SecurityLogList(logs=logs)
