import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fotolokashen.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    STAFFER = "staffer"
    SUPER_ADMIN = "super_admin"


class OnboardingStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    # Vanity URLs resolve /@<username> against this column
    username: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    avatar: Mapped[str | None] = mapped_column(String(500))
    city: Mapped[str | None] = mapped_column(String(100))
    country: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole), default=UserRole.USER)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Login lockout
    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Password reset: only the SHA-256 of the emailed token is stored
    password_reset_token_hash: Mapped[str | None] = mapped_column(String(64), index=True)
    password_reset_expires_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Email verification: the token column holds the SHA-256 of the emailed token
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verification_token: Mapped[str | None] = mapped_column(String(64), index=True)
    verification_token_expiry: Mapped[datetime | None] = mapped_column(DateTime)
    last_verification_email_sent_at: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Main onboarding tour ───────────────────────────────────
    # Discriminator plus payload; see services/onboarding.py for the
    # per-status invariants.
    onboarding_status: Mapped[OnboardingStatus] = mapped_column(
        SAEnum(OnboardingStatus),
        default=OnboardingStatus.NOT_STARTED,
        server_default=OnboardingStatus.NOT_STARTED.name,
        nullable=False,
    )
    onboarding_step: Mapped[int | None] = mapped_column(Integer)
    onboarding_started_at: Mapped[datetime | None] = mapped_column(DateTime)
    onboarding_completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Sub-tours (independent of the main tour) ───────────────
    locations_onboarding_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    people_onboarding_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Terms ──────────────────────────────────────────────────
    terms_accepted_at: Mapped[datetime | None] = mapped_column(DateTime)
    terms_version: Mapped[str | None] = mapped_column(String(20))
    privacy_accepted_at: Mapped[datetime | None] = mapped_column(DateTime)
    privacy_version: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
