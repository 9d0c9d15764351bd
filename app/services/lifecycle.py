"""
Event state machine.

Every state change goes through apply_state_action, which looks the action
up in TRANSITIONS:

    PENDING  --PUBLISH_EVENT-->  PUBLISHED
    PENDING  --REJECT_EVENT-->   CANCELED
    PENDING  --CANCEL_REVIEW-->  CANCELED
    PENDING  --SEND_TO_REVIEW--> PENDING
    CANCELED --SEND_TO_REVIEW--> PENDING

PUBLISHED has no outgoing transitions.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from app.core.config import settings
from app.models.events import Event, EventState
from app.services.exceptions import (
    EventNotModifiableError,
    EventNotPublishedError,
    InvalidEventDateError,
    InvalidTransitionError,
    NotAuthorizedError,
)

logger = logging.getLogger(__name__)


class StateAction(str, enum.Enum):
    PUBLISH_EVENT = "PUBLISH_EVENT"
    REJECT_EVENT = "REJECT_EVENT"
    SEND_TO_REVIEW = "SEND_TO_REVIEW"
    CANCEL_REVIEW = "CANCEL_REVIEW"


class Actor(str, enum.Enum):
    ADMIN = "ADMIN"
    INITIATOR = "INITIATOR"


@dataclass(frozen=True)
class Transition:
    actor: Actor
    to_state: EventState
    # from-state -> error message for the states the action may not leave
    forbidden: Mapping[EventState, str]
    allowed: frozenset[EventState]


TRANSITIONS: dict[StateAction, Transition] = {
    StateAction.PUBLISH_EVENT: Transition(
        actor=Actor.ADMIN,
        to_state=EventState.PUBLISHED,
        allowed=frozenset({EventState.PENDING}),
        forbidden={
            EventState.CANCELED: "Cannot publish a canceled event.",
            EventState.PUBLISHED: "Event is already published.",
        },
    ),
    StateAction.REJECT_EVENT: Transition(
        actor=Actor.ADMIN,
        to_state=EventState.CANCELED,
        allowed=frozenset({EventState.PENDING}),
        forbidden={
            EventState.PUBLISHED: "Cannot reject a published event.",
            EventState.CANCELED: "Event is already canceled.",
        },
    ),
    StateAction.SEND_TO_REVIEW: Transition(
        actor=Actor.INITIATOR,
        to_state=EventState.PENDING,
        allowed=frozenset({EventState.PENDING, EventState.CANCELED}),
        forbidden={EventState.PUBLISHED: "A published event cannot be sent to review."},
    ),
    StateAction.CANCEL_REVIEW: Transition(
        actor=Actor.INITIATOR,
        to_state=EventState.CANCELED,
        allowed=frozenset({EventState.PENDING}),
        forbidden={
            EventState.PUBLISHED: "A published event cannot be withdrawn.",
            EventState.CANCELED: "Event is already canceled.",
        },
    ),
}

# fields an initiator or an administrator may change while the event is not published
EDITABLE_FIELDS = (
    "title",
    "annotation",
    "description",
    "category_id",
    "lat",
    "lon",
    "paid",
    "participant_limit",
    "request_moderation",
    "event_date",
)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every datetime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def apply_state_action(event: Event, action: StateAction, actor: Actor, now: Optional[datetime] = None) -> Event:
    transition = TRANSITIONS[action]
    if transition.actor is not actor:
        raise NotAuthorizedError(f"Action '{action.value}' is not available to {actor.value.lower()}.")

    current = EventState(event.state)
    if current not in transition.allowed:
        raise InvalidTransitionError(
            transition.forbidden.get(current, f"Cannot apply '{action.value}' to a {current.value} event.")
        )

    event.state = transition.to_state.value
    if transition.to_state is EventState.PUBLISHED:
        event.published_on = now or utcnow()

    logger.info(f"Event {event.id}: {current.value} -> {event.state} by {actor.value} ({action.value})")
    return event


def submit_for_review(event: Event) -> Event:
    return apply_state_action(event, StateAction.SEND_TO_REVIEW, Actor.INITIATOR)


def withdraw(event: Event) -> Event:
    return apply_state_action(event, StateAction.CANCEL_REVIEW, Actor.INITIATOR)


def publish(event: Event, now: Optional[datetime] = None) -> Event:
    return apply_state_action(event, StateAction.PUBLISH_EVENT, Actor.ADMIN, now)


def reject(event: Event) -> Event:
    return apply_state_action(event, StateAction.REJECT_EVENT, Actor.ADMIN)


# -------- Guards --------

def assert_ownership(actor_id: int, owner_id: int, message: str) -> None:
    if actor_id != owner_id:
        raise NotAuthorizedError(message)


def assert_published(event: Event) -> None:
    if event.state != EventState.PUBLISHED.value:
        raise EventNotPublishedError(f"Event with id '{event.id}' is not published.")


def assert_not_published(event: Event) -> None:
    if event.state == EventState.PUBLISHED.value:
        raise EventNotModifiableError(f"Published event with id '{event.id}' cannot be modified.")


def validate_event_date(event_date: datetime, now: Optional[datetime] = None) -> None:
    """The event must start at least EVENT_MIN_LEAD_HOURS after now."""
    now = now or utcnow()
    lead = timedelta(hours=settings.EVENT_MIN_LEAD_HOURS)
    if event_date < now + lead:
        raise InvalidEventDateError(
            f"Event date must be at least {settings.EVENT_MIN_LEAD_HOURS} hours from now. Value: {event_date.isoformat()}"
        )


def apply_field_updates(event: Event, changes: Mapping[str, Any]) -> Event:
    """Copy the given editable fields onto a not yet published event."""
    assert_not_published(event)
    for field, value in changes.items():
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field}' is not editable")
        setattr(event, field, value)
    return event
