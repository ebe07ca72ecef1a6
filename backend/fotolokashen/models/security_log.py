"""SecurityLog: append-only audit trail of account events.

Records who did what, from where. Listed back to the user on
GET /api/auth/security-logs.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from fotolokashen.database import Base


class SecurityEvent:
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    LOGOUT = "LOGOUT"
    PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
    PASSWORD_RESET = "PASSWORD_RESET"
    VERIFICATION_EMAIL_SENT = "VERIFICATION_EMAIL_SENT"
    EMAIL_VERIFIED = "EMAIL_VERIFIED"
    TERMS_ACCEPTED = "TERMS_ACCEPTED"
    ONBOARDING_RESET_BY_ADMIN = "ONBOARDING_RESET_BY_ADMIN"
    ROLE_CHANGED = "ROLE_CHANGED"


class SecurityLog(Base):
    __tablename__ = "security_logs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── Who ────────────────────────────────────────────────────
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ── What ───────────────────────────────────────────────────
    event_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # ── Where from ─────────────────────────────────────────────
    ip_address: Mapped[str] = mapped_column(String(100), default="unknown")
    user_agent: Mapped[str] = mapped_column(String(500), default="unknown")
    # web | mobile-browser-ios | mobile-browser-android | mobile-browser
    device_type: Mapped[str] = mapped_column(String(30), default="web")

    details: Mapped[dict | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False, index=True
    )
