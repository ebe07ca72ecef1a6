"""Onboarding tour: main tour transitions, sub-tours, and terms acceptance.

Endpoints:
  GET   /api/onboarding/                    → current progress
  POST  /api/onboarding/start               → begin (or restart) the tour at step 0
  PATCH /api/onboarding/step                → record the step the user reached
  POST  /api/onboarding/complete            → mark the tour finished
  POST  /api/onboarding/skip                → opt out of the tour
  POST  /api/onboarding/reset               → back to not started
  POST  /api/onboarding/locations/complete  → locations sub-tour done
  POST  /api/onboarding/locations/reset     → locations sub-tour cleared
  POST  /api/onboarding/people/complete     → people sub-tour done
  POST  /api/onboarding/people/reset        → people sub-tour cleared
  POST  /api/onboarding/accept-terms        → record terms + privacy acceptance

Request bodies are ignored except on PATCH /step. Every mutating call
authenticates, then writes the user row exactly once.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.auth.deps import get_current_user
from fotolokashen.database import get_db
from fotolokashen.models.user import User
from fotolokashen.schemas.onboarding import (
    OnboardingActionResult,
    OnboardingProgress,
    StepUpdate,
    TermsAccepted,
)
from fotolokashen.services import onboarding as tracker
from fotolokashen.services.onboarding import OnboardingState, SubTour, TOTAL_STEPS
from fotolokashen.utils.user_agent import client_ip, request_user_agent

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def make_progress(user: User) -> OnboardingProgress:
    """Build an OnboardingProgress response from the user row."""
    state = OnboardingState.from_user(user)
    return OnboardingProgress(
        status=state.status.value,
        total_steps=TOTAL_STEPS,
        onboarding_step=state.step,
        onboarding_started_at=state.started_at,
        onboarding_completed_at=state.completed_at,
        onboarding_completed=state.is_completed,
        onboarding_skipped=state.is_skipped,
        locations_onboarding_completed=bool(user.locations_onboarding_completed),
        people_onboarding_completed=bool(user.people_onboarding_completed),
        terms_accepted_at=user.terms_accepted_at,
        terms_version=user.terms_version,
    )


# ── GET /api/onboarding/ ─────────────────────────────────────

@router.get("/", response_model=OnboardingProgress)
async def get_progress(user: User = Depends(get_current_user)):
    return make_progress(user)


# ── Main tour ────────────────────────────────────────────────

@router.post("/start", response_model=OnboardingActionResult)
async def start(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.start_onboarding(db, user)
    return OnboardingActionResult(message="Onboarding started")


@router.patch("/step", response_model=OnboardingProgress)
async def record_step(
    body: StepUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Save how far the user got so the tour can resume there."""
    await tracker.record_step(db, user, body.step)
    return make_progress(user)


@router.post("/complete", response_model=OnboardingActionResult)
async def complete(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.complete_onboarding(db, user)
    return OnboardingActionResult(message="Onboarding completed")


@router.post("/skip", response_model=OnboardingActionResult)
async def skip(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.skip_onboarding(db, user)
    return OnboardingActionResult(message="Onboarding skipped")


@router.post("/reset", response_model=OnboardingActionResult)
async def reset(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.reset_onboarding(db, user)
    return OnboardingActionResult(message="Onboarding reset")


# ── Sub-tours ────────────────────────────────────────────────

@router.post(
    "/locations/complete",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
)
async def complete_locations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.set_subtour_completed(db, user, SubTour.LOCATIONS, True)
    return OnboardingActionResult()


@router.post(
    "/locations/reset",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
)
@router.post(
    "/reset-locations",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def reset_locations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.set_subtour_completed(db, user, SubTour.LOCATIONS, False)
    return OnboardingActionResult()


@router.post(
    "/people/complete",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
)
async def complete_people(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.set_subtour_completed(db, user, SubTour.PEOPLE, True)
    return OnboardingActionResult()


@router.post(
    "/people/reset",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
)
@router.post(
    "/reset-people",
    response_model=OnboardingActionResult,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def reset_people(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await tracker.set_subtour_completed(db, user, SubTour.PEOPLE, False)
    return OnboardingActionResult()


# ── Terms ────────────────────────────────────────────────────

@router.post("/accept-terms", response_model=TermsAccepted)
async def accept_terms(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    accepted_at = await tracker.accept_terms(
        db,
        user,
        ip_address=client_ip(request),
        user_agent=request_user_agent(request),
    )
    return TermsAccepted(terms_accepted_at=accepted_at)
