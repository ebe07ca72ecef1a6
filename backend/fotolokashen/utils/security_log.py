"""Lightweight helper for recording security log entries.

Usage:
    log_security_event(
        db, user.id, SecurityEvent.LOGIN_SUCCESS,
        ip_address=client_ip(request), user_agent=ua,
        details={"remember_me": True},
    )

The row is added to the current session and committed with the
enclosing transaction; no extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.models.security_log import SecurityLog
from fotolokashen.utils.user_agent import detect_device_type


def log_security_event(
    db: AsyncSession,
    user_id: str,
    event_type: str,
    *,
    ip_address: str = "unknown",
    user_agent: str = "unknown",
    details: dict | None = None,
) -> SecurityLog:
    """Append a security log entry to the current DB session."""
    entry = SecurityLog(
        user_id=user_id,
        event_type=event_type,
        ip_address=ip_address,
        user_agent=user_agent[:500],
        device_type=detect_device_type(user_agent),
        details=details,
    )
    db.add(entry)
    return entry


_EVENT_LABELS = {
    "LOGIN_SUCCESS": "Signed in",
    "LOGIN_FAILED": "Failed sign-in attempt",
    "ACCOUNT_LOCKED": "Account locked after failed sign-ins",
    "LOGOUT": "Signed out",
    "PASSWORD_RESET_REQUESTED": "Password reset requested",
    "PASSWORD_RESET": "Password changed via reset link",
    "VERIFICATION_EMAIL_SENT": "Verification link sent",
    "EMAIL_VERIFIED": "Email address verified",
    "TERMS_ACCEPTED": "Accepted terms of service",
    "ONBOARDING_RESET_BY_ADMIN": "Onboarding reset by staff",
    "ROLE_CHANGED": "Account role changed by an administrator",
}


def format_security_log(entry: SecurityLog) -> str:
    """One-line description for the account activity page."""
    label = _EVENT_LABELS.get(entry.event_type, entry.event_type.replace("_", " ").capitalize())
    return f"{label} from {entry.device_type} ({entry.ip_address})"
