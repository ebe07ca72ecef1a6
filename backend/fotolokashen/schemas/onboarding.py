"""Pydantic schemas for the onboarding tour."""

from datetime import datetime

from pydantic import BaseModel, Field


class OnboardingProgress(BaseModel):
    """Read view of a user's onboarding.

    `status` is authoritative; the flat `onboarding_*` flags are derived
    from it for clients written against the older shape.
    """
    status: str
    total_steps: int
    onboarding_step: int | None = None
    onboarding_started_at: datetime | None = None
    onboarding_completed_at: datetime | None = None
    onboarding_completed: bool = False
    onboarding_skipped: bool = False
    locations_onboarding_completed: bool = False
    people_onboarding_completed: bool = False
    terms_accepted_at: datetime | None = None
    terms_version: str | None = None


class StepUpdate(BaseModel):
    step: int = Field(ge=0)


class OnboardingActionResult(BaseModel):
    success: bool = True
    message: str | None = None


class TermsAccepted(BaseModel):
    success: bool = True
    terms_accepted_at: datetime
