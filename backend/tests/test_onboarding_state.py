"""Tests for the onboarding state machine (no database)."""

from datetime import datetime, timedelta

import pytest

from fotolokashen.models.user import OnboardingStatus
from fotolokashen.services.onboarding import (
    TOTAL_STEPS,
    InvalidTransitionError,
    OnboardingEvent,
    OnboardingState,
    transition,
)

EARLIER = datetime(2026, 1, 1, 9, 0, 0)
NOW = datetime(2026, 1, 2, 12, 30, 0)

ALL_STATES = [
    OnboardingState.not_started(),
    OnboardingState.in_progress(0, started_at=EARLIER),
    OnboardingState.in_progress(5, started_at=EARLIER),
    OnboardingState.completed(completed_at=EARLIER, started_at=EARLIER),
    OnboardingState.completed(completed_at=EARLIER),
    OnboardingState.skipped(started_at=EARLIER),
    OnboardingState.skipped(),
]


@pytest.mark.unit
class TestOnboardingState:
    """Each status only carries the payload that belongs to it."""

    def test_not_started_is_empty(self):
        state = OnboardingState.not_started()
        assert state.step is None
        assert state.started_at is None
        assert state.completed_at is None
        assert not state.is_completed
        assert not state.is_skipped

    @pytest.mark.parametrize("step", [-1, TOTAL_STEPS, 42])
    def test_in_progress_step_out_of_range(self, step):
        with pytest.raises(ValueError):
            OnboardingState.in_progress(step, started_at=EARLIER)

    def test_in_progress_needs_started_at(self):
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.IN_PROGRESS, step=2)

    def test_completed_is_always_last_step(self):
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.COMPLETED, step=3, completed_at=NOW)

    def test_completed_needs_timestamp(self):
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.COMPLETED, step=TOTAL_STEPS)

    def test_skipped_cannot_carry_completion(self):
        """A tour cannot be both skipped and completed."""
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.SKIPPED, completed_at=NOW)

    def test_skipped_cannot_carry_step(self):
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.SKIPPED, step=4)

    def test_not_started_rejects_payload(self):
        with pytest.raises(ValueError):
            OnboardingState(OnboardingStatus.NOT_STARTED, started_at=EARLIER)

    def test_to_columns_writes_every_payload_column(self):
        columns = OnboardingState.skipped(started_at=EARLIER).to_columns()
        assert columns == {
            "onboarding_status": OnboardingStatus.SKIPPED,
            "onboarding_step": None,
            "onboarding_started_at": EARLIER,
            "onboarding_completed_at": None,
        }


@pytest.mark.unit
class TestTransitions:
    """transition() over every event and starting state."""

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_start_from_any_state(self, state):
        nxt = transition(state, OnboardingEvent.START, now=NOW)
        assert nxt == OnboardingState.in_progress(0, started_at=NOW)

    def test_start_twice_rewinds(self):
        first = transition(OnboardingState.not_started(), OnboardingEvent.START, now=EARLIER)
        moved = transition(first, OnboardingEvent.ADVANCE, now=EARLIER, step=6)
        again = transition(moved, OnboardingEvent.START, now=NOW)
        assert again.step == 0
        assert again.started_at == NOW

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_complete_from_any_state(self, state):
        nxt = transition(state, OnboardingEvent.COMPLETE, now=NOW)
        assert nxt.status == OnboardingStatus.COMPLETED
        assert nxt.step == TOTAL_STEPS
        assert nxt.completed_at == NOW
        assert nxt.started_at == state.started_at
        assert not nxt.is_skipped

    def test_force_complete_from_not_started(self):
        nxt = transition(OnboardingState.not_started(), OnboardingEvent.COMPLETE, now=NOW)
        assert nxt.is_completed
        assert nxt.started_at is None

    def test_complete_after_skip_clears_skip(self):
        skipped = OnboardingState.skipped(started_at=EARLIER)
        nxt = transition(skipped, OnboardingEvent.COMPLETE, now=NOW)
        assert nxt.is_completed
        assert not nxt.is_skipped

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_skip_from_any_state(self, state):
        nxt = transition(state, OnboardingEvent.SKIP, now=NOW)
        assert nxt.status == OnboardingStatus.SKIPPED
        assert nxt.step is None
        assert nxt.completed_at is None
        assert nxt.started_at == state.started_at

    def test_skip_after_complete_clears_completion(self):
        done = OnboardingState.completed(completed_at=EARLIER, started_at=EARLIER)
        nxt = transition(done, OnboardingEvent.SKIP, now=NOW)
        assert nxt.is_skipped
        assert not nxt.is_completed
        assert nxt.completed_at is None

    @pytest.mark.parametrize("state", ALL_STATES)
    def test_reset_from_any_state(self, state):
        assert transition(state, OnboardingEvent.RESET, now=NOW) == OnboardingState.not_started()

    def test_advance_keeps_started_at(self):
        state = OnboardingState.in_progress(2, started_at=EARLIER)
        nxt = transition(state, OnboardingEvent.ADVANCE, now=NOW, step=3)
        assert nxt == OnboardingState.in_progress(3, started_at=EARLIER)

    def test_advance_may_move_backwards(self):
        state = OnboardingState.in_progress(7, started_at=EARLIER)
        nxt = transition(state, OnboardingEvent.ADVANCE, now=NOW, step=1)
        assert nxt.step == 1

    @pytest.mark.parametrize("step", [None, -1, TOTAL_STEPS])
    def test_advance_rejects_bad_step(self, step):
        state = OnboardingState.in_progress(2, started_at=EARLIER)
        with pytest.raises(InvalidTransitionError):
            transition(state, OnboardingEvent.ADVANCE, now=NOW, step=step)

    @pytest.mark.parametrize(
        "state",
        [s for s in ALL_STATES if s.status != OnboardingStatus.IN_PROGRESS],
    )
    def test_advance_only_while_in_progress(self, state):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(state, OnboardingEvent.ADVANCE, now=NOW, step=1)
        assert exc_info.value.status_code == 422
        assert exc_info.value.error_code == "INVALID_ONBOARDING_TRANSITION"

    def test_transition_is_pure(self):
        state = OnboardingState.in_progress(4, started_at=EARLIER)
        transition(state, OnboardingEvent.COMPLETE, now=NOW)
        assert state == OnboardingState.in_progress(4, started_at=EARLIER)

    def test_later_now_only_moves_timestamps(self):
        a = transition(OnboardingState.not_started(), OnboardingEvent.START, now=NOW)
        b = transition(
            OnboardingState.not_started(), OnboardingEvent.START, now=NOW + timedelta(minutes=5)
        )
        assert a.status == b.status
        assert a.step == b.step
        assert a.started_at < b.started_at
