"""
Test the event state machine and the edit guards.
"""
from datetime import datetime, timedelta

import pytest

from app.models.events import Event, EventState
from app.services import lifecycle
from app.services.exceptions import (
    EventNotModifiableError,
    EventNotPublishedError,
    InvalidEventDateError,
    InvalidTransitionError,
    NotAuthorizedError,
)
from app.services.lifecycle import Actor, StateAction


def make_event(state: EventState) -> Event:
    return Event(id=1, title="Lecture", state=state.value, participant_limit=0, confirmed_requests=0)


class TestTransitions:
    """Every (state, action) pair of the transition table."""

    @pytest.mark.parametrize(
        "state,action,expected",
        [
            (EventState.PENDING, StateAction.PUBLISH_EVENT, EventState.PUBLISHED),
            (EventState.PENDING, StateAction.REJECT_EVENT, EventState.CANCELED),
            (EventState.PENDING, StateAction.CANCEL_REVIEW, EventState.CANCELED),
            (EventState.PENDING, StateAction.SEND_TO_REVIEW, EventState.PENDING),
            (EventState.CANCELED, StateAction.SEND_TO_REVIEW, EventState.PENDING),
        ],
    )
    def test_allowed_transitions(self, state, action, expected):
        event = make_event(state)
        actor = lifecycle.TRANSITIONS[action].actor

        lifecycle.apply_state_action(event, action, actor)

        assert event.state == expected.value

    @pytest.mark.parametrize(
        "state,action",
        [
            (EventState.CANCELED, StateAction.PUBLISH_EVENT),
            (EventState.PUBLISHED, StateAction.PUBLISH_EVENT),
            (EventState.PUBLISHED, StateAction.REJECT_EVENT),
            (EventState.CANCELED, StateAction.REJECT_EVENT),
            (EventState.PUBLISHED, StateAction.SEND_TO_REVIEW),
            (EventState.PUBLISHED, StateAction.CANCEL_REVIEW),
            (EventState.CANCELED, StateAction.CANCEL_REVIEW),
        ],
    )
    def test_forbidden_transitions(self, state, action):
        event = make_event(state)
        actor = lifecycle.TRANSITIONS[action].actor

        with pytest.raises(InvalidTransitionError):
            lifecycle.apply_state_action(event, action, actor)

        assert event.state == state.value

    def test_published_is_terminal(self):
        event = make_event(EventState.PUBLISHED)
        for action, transition in lifecycle.TRANSITIONS.items():
            with pytest.raises(InvalidTransitionError):
                lifecycle.apply_state_action(event, action, transition.actor)
        assert event.state == EventState.PUBLISHED.value

    def test_publish_sets_published_on(self):
        event = make_event(EventState.PENDING)
        now = datetime(2030, 1, 1, 12, 0, 0)

        lifecycle.publish(event, now)

        assert event.state == EventState.PUBLISHED.value
        assert event.published_on == now

    def test_rejected_event_cannot_be_published(self):
        event = make_event(EventState.PENDING)
        lifecycle.reject(event)

        with pytest.raises(InvalidTransitionError, match="canceled"):
            lifecycle.publish(event)

    def test_resubmitted_event_can_be_published(self):
        event = make_event(EventState.PENDING)
        lifecycle.withdraw(event)
        lifecycle.submit_for_review(event)
        lifecycle.publish(event)

        assert event.state == EventState.PUBLISHED.value

    def test_initiator_cannot_publish(self):
        event = make_event(EventState.PENDING)

        with pytest.raises(NotAuthorizedError):
            lifecycle.apply_state_action(event, StateAction.PUBLISH_EVENT, Actor.INITIATOR)

        assert event.state == EventState.PENDING.value

    def test_admin_cannot_send_to_review(self):
        event = make_event(EventState.CANCELED)

        with pytest.raises(NotAuthorizedError):
            lifecycle.apply_state_action(event, StateAction.SEND_TO_REVIEW, Actor.ADMIN)


class TestGuards:
    """Test ownership, state and date guards."""

    def test_ownership(self):
        lifecycle.assert_ownership(1, 1, "nope")
        with pytest.raises(NotAuthorizedError, match="nope"):
            lifecycle.assert_ownership(2, 1, "nope")

    def test_assert_published(self):
        lifecycle.assert_published(make_event(EventState.PUBLISHED))
        for state in (EventState.PENDING, EventState.CANCELED):
            with pytest.raises(EventNotPublishedError):
                lifecycle.assert_published(make_event(state))

    def test_field_updates_on_published_event(self):
        event = make_event(EventState.PUBLISHED)

        with pytest.raises(EventNotModifiableError):
            lifecycle.apply_field_updates(event, {"title": "Renamed"})

        assert event.title == "Lecture"

    def test_field_updates_on_pending_event(self):
        event = make_event(EventState.PENDING)

        lifecycle.apply_field_updates(event, {"title": "Renamed", "participant_limit": 5})

        assert event.title == "Renamed"
        assert event.participant_limit == 5

    def test_field_updates_reject_unknown_fields(self):
        event = make_event(EventState.PENDING)

        with pytest.raises(ValueError):
            lifecycle.apply_field_updates(event, {"state": EventState.PUBLISHED.value})

        assert event.state == EventState.PENDING.value

    def test_event_date_lead_time(self):
        now = datetime(2030, 1, 1, 12, 0, 0)

        lifecycle.validate_event_date(now + timedelta(hours=2), now)
        lifecycle.validate_event_date(now + timedelta(days=1), now)
        with pytest.raises(InvalidEventDateError):
            lifecycle.validate_event_date(now + timedelta(hours=1, minutes=59), now)
        with pytest.raises(InvalidEventDateError):
            lifecycle.validate_event_date(now - timedelta(days=1), now)
