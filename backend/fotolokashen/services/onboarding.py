"""Onboarding progress tracker.

The main tour is a tagged state persisted as one discriminator column
(`users.onboarding_status`) plus payload columns:

  not_started   step=None  started_at=None  completed_at=None
  in_progress   step=0..8  started_at set   completed_at=None
  completed     step=9     started_at any   completed_at set
  skipped       step=None  started_at any   completed_at=None

`transition()` is the only place a next state is computed. Every
operation below loads nothing extra (the authenticated user row is
already in the session), computes the next state, and issues exactly
one write through services.users.update_user_fields.

Complete does not check how far the user got: the client may force
completion from any state.

The locations and people sub-tours are plain booleans with no relation
to the main tour.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fotolokashen.middleware.exceptions import BusinessLogicError, PersistenceError
from fotolokashen.models.security_log import SecurityEvent
from fotolokashen.models.user import OnboardingStatus, User
from fotolokashen.services.users import update_user_fields
from fotolokashen.utils.security_log import log_security_event

logger = logging.getLogger(__name__)

TOTAL_STEPS = 9
TERMS_VERSION = "1.0"
PRIVACY_VERSION = "1.0"


class OnboardingEvent(str, enum.Enum):
    START = "start"
    ADVANCE = "advance"
    COMPLETE = "complete"
    SKIP = "skip"
    RESET = "reset"


class SubTour(str, enum.Enum):
    LOCATIONS = "locations"
    PEOPLE = "people"


_SUBTOUR_COLUMNS = {
    SubTour.LOCATIONS: "locations_onboarding_completed",
    SubTour.PEOPLE: "people_onboarding_completed",
}


class InvalidTransitionError(BusinessLogicError):
    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_ONBOARDING_TRANSITION")


# ── State ────────────────────────────────────────────────────

@dataclass(frozen=True)
class OnboardingState:
    status: OnboardingStatus
    step: int | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self):
        s = self.status
        if s == OnboardingStatus.NOT_STARTED:
            ok = self.step is None and self.started_at is None and self.completed_at is None
        elif s == OnboardingStatus.IN_PROGRESS:
            ok = (
                self.step is not None
                and 0 <= self.step < TOTAL_STEPS
                and self.started_at is not None
                and self.completed_at is None
            )
        elif s == OnboardingStatus.COMPLETED:
            ok = self.step == TOTAL_STEPS and self.completed_at is not None
        elif s == OnboardingStatus.SKIPPED:
            ok = self.step is None and self.completed_at is None
        else:
            ok = False
        if not ok:
            raise ValueError(f"Inconsistent onboarding state: {self!r}")

    # ── Constructors ──

    @classmethod
    def not_started(cls) -> OnboardingState:
        return cls(OnboardingStatus.NOT_STARTED)

    @classmethod
    def in_progress(cls, step: int, started_at: datetime) -> OnboardingState:
        return cls(OnboardingStatus.IN_PROGRESS, step=step, started_at=started_at)

    @classmethod
    def completed(cls, completed_at: datetime, started_at: datetime | None = None) -> OnboardingState:
        return cls(
            OnboardingStatus.COMPLETED,
            step=TOTAL_STEPS,
            started_at=started_at,
            completed_at=completed_at,
        )

    @classmethod
    def skipped(cls, started_at: datetime | None = None) -> OnboardingState:
        return cls(OnboardingStatus.SKIPPED, started_at=started_at)

    @classmethod
    def from_user(cls, user: User) -> OnboardingState:
        return cls(
            status=user.onboarding_status or OnboardingStatus.NOT_STARTED,
            step=user.onboarding_step,
            started_at=user.onboarding_started_at,
            completed_at=user.onboarding_completed_at,
        )

    # ── Persistence / views ──

    def to_columns(self) -> dict:
        """Full column set for users; every payload column is always written."""
        return {
            "onboarding_status": self.status,
            "onboarding_step": self.step,
            "onboarding_started_at": self.started_at,
            "onboarding_completed_at": self.completed_at,
        }

    @property
    def is_completed(self) -> bool:
        return self.status == OnboardingStatus.COMPLETED

    @property
    def is_skipped(self) -> bool:
        return self.status == OnboardingStatus.SKIPPED


def transition(
    state: OnboardingState,
    event: OnboardingEvent,
    now: datetime,
    step: int | None = None,
) -> OnboardingState:
    """Return the state after `event`. Pure; `now` stamps any timestamps set."""
    if event == OnboardingEvent.START:
        # Rewinds an in-progress or finished tour
        return OnboardingState.in_progress(0, started_at=now)

    if event == OnboardingEvent.ADVANCE:
        if state.status != OnboardingStatus.IN_PROGRESS:
            raise InvalidTransitionError(
                f"Cannot record a step while onboarding is {state.status.value}"
            )
        if step is None or not 0 <= step < TOTAL_STEPS:
            raise InvalidTransitionError(
                f"Step must be between 0 and {TOTAL_STEPS - 1}"
            )
        return OnboardingState.in_progress(step, started_at=state.started_at)

    if event == OnboardingEvent.COMPLETE:
        return OnboardingState.completed(completed_at=now, started_at=state.started_at)

    if event == OnboardingEvent.SKIP:
        return OnboardingState.skipped(started_at=state.started_at)

    if event == OnboardingEvent.RESET:
        return OnboardingState.not_started()

    raise ValueError(f"Unhandled onboarding event: {event!r}")


# ── Operations ──────────────────────────────────────────────

async def _write(db: AsyncSession, user_id: str, fields: dict, failure_message: str) -> None:
    try:
        await update_user_fields(db, user_id, **fields)
    except SQLAlchemyError as exc:
        logger.exception("Onboarding write failed for user %s", user_id)
        await db.rollback()
        raise PersistenceError(failure_message) from exc


async def _apply(
    db: AsyncSession,
    user: User,
    event: OnboardingEvent,
    failure_message: str,
    step: int | None = None,
) -> OnboardingState:
    current = OnboardingState.from_user(user)
    nxt = transition(current, event, now=datetime.utcnow(), step=step)
    await _write(db, user.id, nxt.to_columns(), failure_message)
    logger.info(
        "Onboarding %s for user %s: %s -> %s",
        event.value, user.id, current.status.value, nxt.status.value,
    )
    return nxt


async def start_onboarding(db: AsyncSession, user: User) -> OnboardingState:
    return await _apply(db, user, OnboardingEvent.START, "Failed to start onboarding")


async def record_step(db: AsyncSession, user: User, step: int) -> OnboardingState:
    return await _apply(
        db, user, OnboardingEvent.ADVANCE, "Failed to save onboarding progress", step=step
    )


async def complete_onboarding(db: AsyncSession, user: User) -> OnboardingState:
    return await _apply(db, user, OnboardingEvent.COMPLETE, "Failed to complete onboarding")


async def skip_onboarding(db: AsyncSession, user: User) -> OnboardingState:
    return await _apply(db, user, OnboardingEvent.SKIP, "Failed to skip onboarding")


async def reset_onboarding(db: AsyncSession, user: User) -> OnboardingState:
    return await _apply(db, user, OnboardingEvent.RESET, "Failed to reset onboarding")


async def set_subtour_completed(
    db: AsyncSession,
    user: User,
    subtour: SubTour,
    completed: bool,
) -> None:
    """Set or clear one sub-tour flag; nothing else is touched."""
    column = _SUBTOUR_COLUMNS[subtour]
    await _write(
        db,
        user.id,
        {column: completed},
        "Failed to update onboarding status" if completed else "Failed to reset onboarding status",
    )


async def accept_terms(
    db: AsyncSession,
    user: User,
    ip_address: str = "unknown",
    user_agent: str = "unknown",
) -> datetime:
    """Record terms + privacy acceptance and its audit row in one commit."""
    now = datetime.utcnow()
    log_security_event(
        db,
        user.id,
        SecurityEvent.TERMS_ACCEPTED,
        ip_address=ip_address,
        user_agent=user_agent,
        details={"version": TERMS_VERSION},
    )
    await _write(
        db,
        user.id,
        {
            "terms_accepted_at": now,
            "terms_version": TERMS_VERSION,
            "privacy_accepted_at": now,
            "privacy_version": PRIVACY_VERSION,
        },
        "Failed to record terms acceptance",
    )
    return now
