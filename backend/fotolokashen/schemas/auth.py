from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from fotolokashen.models.user import UserRole
from fotolokashen.schemas.onboarding import OnboardingProgress


class UserOut(BaseModel):
    id: str
    email: str
    username: str
    first_name: str | None
    last_name: str | None
    avatar: str | None
    city: str | None
    country: str | None
    role: str
    is_active: bool
    email_verified: bool = False
    created_at: datetime | None = None
    onboarding: OnboardingProgress | None = None

    model_config = {"from_attributes": True}


class PublicProfile(BaseModel):
    """What anyone can see at /@<username>."""
    username: str
    first_name: str | None
    last_name: str | None
    avatar: str | None
    city: str | None
    country: str | None

    model_config = {"from_attributes": True}


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    # Upper bound keeps bcrypt work bounded
    password: str = Field(min_length=1, max_length=255)
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginResponse(BaseModel):
    success: bool = True
    user: UserOut
    token: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ── Password reset ──────────────────────────────────────────

class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordResponse(MessageResponse):
    # Only populated in development, where no email is sent
    dev_token: str | None = None


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, max_length=255)


# ── Email verification ──────────────────────────────────────

class VerifyEmailRequest(BaseModel):
    token: str = Field(min_length=1)


class VerificationSentResponse(MessageResponse):
    # Only populated in development, where no email is sent
    dev_token: str | None = None


# ── Security log ────────────────────────────────────────────

class SecurityLogEntry(BaseModel):
    id: str
    event_type: str
    ip_address: str
    user_agent: str
    device_type: str
    details: dict | None = None
    created_at: datetime
    display: str


class SecurityLogList(BaseModel):
    success: bool = True
    logs: list[SecurityLogEntry]


# ── Roles ────────────────────────────────────────────────────

class RoleUpdate(BaseModel):
    role: UserRole
