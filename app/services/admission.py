"""
Participation admission control.

Every operation that reads an event's confirmed count and may change it runs
under event_lock(event_id) and loads the event row FOR UPDATE inside the same
transaction that writes the requests and the counter.
"""

import logging
from dataclasses import dataclass, field
from typing import Generic, Iterable, Sequence, TypeVar

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.events import Event
from app.models.participation import ParticipationRequest, ParticipationStatus
from app.services import lifecycle
from app.services.exceptions import (
    CapacityExceededError,
    DuplicateRequestError,
    EventNotModifiableError,
    InvalidRequestStateError,
    NotFoundError,
    SelfParticipationForbiddenError,
)
from app.services.locks import event_lock
from app.services.repositories import EventStore, ParticipationStore
from app.services.users import get_user

logger = logging.getLogger(__name__)

T = TypeVar("T")

DECIDABLE_STATUSES = (ParticipationStatus.CONFIRMED, ParticipationStatus.REJECTED)


@dataclass(frozen=True)
class Decision(Generic[T]):
    confirmed: list[T]
    rejected: list[T]
    confirmed_count: int


@dataclass
class StatusUpdateResult:
    confirmed_requests: list[ParticipationRequest] = field(default_factory=list)
    rejected_requests: list[ParticipationRequest] = field(default_factory=list)


def decide(items: Sequence[T], target: ParticipationStatus, current_count: int, limit: int) -> Decision[T]:
    """
    Split items into confirmed and rejected.

    With target CONFIRMED, items are confirmed in order while the count stays
    within the limit (0 means unlimited); once the limit is reached the rest
    are rejected. With target REJECTED every item is rejected.
    """
    confirmed: list[T] = []
    rejected: list[T] = []
    count = current_count
    for item in items:
        if target is ParticipationStatus.CONFIRMED and (limit == 0 or count < limit):
            confirmed.append(item)
            count += 1
        else:
            rejected.append(item)
    return Decision(confirmed=confirmed, rejected=rejected, confirmed_count=count)


def _dedupe(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    ordered = []
    for i in ids:
        if i not in seen:
            seen.add(i)
            ordered.append(i)
    return ordered


def _get_event_locked(db: Session, event_id: int) -> Event:
    event = EventStore.get(db, event_id, for_update=True)
    if not event:
        raise NotFoundError(f"Event with id '{event_id}' not found.")
    return event


def _add_confirmed(db: Session, event: Event, count: int) -> None:
    """Increment the confirmed counter, refusing to move it past the limit."""
    stmt = (
        update(Event)
        .where(Event.id == event.id)
        .where(
            or_(
                Event.participant_limit == 0,
                Event.confirmed_requests + count <= Event.participant_limit,
            )
        )
        .values(confirmed_requests=Event.confirmed_requests + count)
        .execution_options(synchronize_session=False)
    )
    res = db.execute(stmt)
    if res.rowcount != 1:  # type: ignore
        raise CapacityExceededError(f"Participant limit reached for event with id '{event.id}'.")
    db.refresh(event, ["confirmed_requests"])


def request_participation(db: Session, *, user_id: int, event_id: int) -> ParticipationRequest:
    """
    Create a participation request. It is confirmed at once when the event has
    no participant limit or no moderation; otherwise it waits as PENDING.
    """
    with event_lock(event_id):
        with transaction(db):
            requester = get_user(db, user_id)
            event = _get_event_locked(db, event_id)

            if event.initiator_id == requester.id:
                raise SelfParticipationForbiddenError(
                    f"Initiator with id '{user_id}' cannot request participation in own event with id '{event_id}'."
                )
            lifecycle.assert_published(event)
            if ParticipationStore.find_active(db, requester.id, event.id):
                raise DuplicateRequestError(
                    f"Participation request from user '{user_id}' for event '{event_id}' already exists."
                )
            if event.participant_limit > 0 and event.confirmed_requests >= event.participant_limit:
                raise CapacityExceededError(f"Participant limit reached for event with id '{event_id}'.")

            auto_confirm = event.participant_limit == 0 or not event.request_moderation
            status = ParticipationStatus.CONFIRMED if auto_confirm else ParticipationStatus.PENDING
            request = ParticipationRequest(
                requester_id=requester.id,
                event_id=event.id,
                status=status.value,
                created=lifecycle.utcnow(),
            )
            ParticipationStore.save(db, request)
            if auto_confirm:
                _add_confirmed(db, event, 1)

            logger.info(
                f"Participation request {request.id} by user {user_id} for event {event_id} "
                f"created as {status.value}; confirmed {event.confirmed_requests}/{event.participant_limit}"
            )
    return request


def cancel_request(db: Session, *, user_id: int, request_id: int) -> ParticipationRequest:
    """
    Cancel the caller's own request. Canceling again is a no-op. The event's
    confirmed count is left unchanged when a confirmed request is canceled.
    """
    get_user(db, user_id)
    request = ParticipationStore.get(db, request_id)
    if not request:
        raise NotFoundError(f"Participation request with id '{request_id}' not found.")
    lifecycle.assert_ownership(
        user_id, request.requester_id, f"User '{user_id}' cannot cancel participation request '{request_id}'."
    )

    with event_lock(request.event_id):
        with transaction(db):
            db.refresh(request)
            if request.status == ParticipationStatus.CANCELED.value:
                return request
            previous = request.status
            request.status = ParticipationStatus.CANCELED.value
            logger.info(f"Participation request {request_id} canceled by user {user_id} (was {previous})")
    return request


def update_request_statuses(
    db: Session,
    *,
    user_id: int,
    event_id: int,
    request_ids: Sequence[int],
    status: ParticipationStatus,
) -> StatusUpdateResult:
    """
    Confirm or reject pending requests of the caller's event.

    Requests are confirmed in the given order until the participant limit is
    reached; the remaining ones are rejected. Nothing is written if any named
    request is not pending.
    """
    target = ParticipationStatus(status)
    with event_lock(event_id):
        with transaction(db):
            get_user(db, user_id)
            event = _get_event_locked(db, event_id)
            lifecycle.assert_ownership(
                user_id, event.initiator_id, f"User '{user_id}' is not the initiator of event '{event_id}'."
            )

            if event.participant_limit == 0 or not event.request_moderation:
                raise EventNotModifiableError(
                    f"Event with id '{event_id}' needs no request approval; requests are confirmed automatically. "
                    f"Participant limit: {event.participant_limit}, moderation: {event.request_moderation}"
                )
            if event.confirmed_requests >= event.participant_limit:
                raise CapacityExceededError(f"Participant limit already reached for event with id '{event_id}'.")
            if target not in DECIDABLE_STATUSES:
                raise InvalidRequestStateError(f"Requests can only be CONFIRMED or REJECTED, not {target.value}.")

            ids = _dedupe(request_ids)
            by_id = {r.id: r for r in ParticipationStore.find_by_ids(db, ids)}
            requests = []
            for request_id in ids:
                request = by_id.get(request_id)
                if request is None or request.event_id != event.id:
                    raise NotFoundError(
                        f"Participation request with id '{request_id}' not found for event '{event_id}'."
                    )
                requests.append(request)

            for request in requests:
                if request.status != ParticipationStatus.PENDING.value:
                    raise InvalidRequestStateError(
                        f"Request '{request.id}' must be PENDING to change its status. Current status: '{request.status}'"
                    )

            decision = decide(requests, target, event.confirmed_requests, event.participant_limit)
            for request in decision.confirmed:
                request.status = ParticipationStatus.CONFIRMED.value
            for request in decision.rejected:
                request.status = ParticipationStatus.REJECTED.value
            db.flush()
            if decision.confirmed:
                _add_confirmed(db, event, len(decision.confirmed))

            result = StatusUpdateResult(
                confirmed_requests=decision.confirmed,
                rejected_requests=decision.rejected,
            )
            logger.info(
                f"Event {event_id}: {len(decision.confirmed)} requests confirmed, "
                f"{len(decision.rejected)} rejected by user {user_id}; "
                f"confirmed {decision.confirmed_count}/{event.participant_limit}"
            )
    return result


def find_requests_by_user(db: Session, user_id: int) -> list[ParticipationRequest]:
    get_user(db, user_id)
    requests = ParticipationStore.find_by_requester(db, user_id)
    logger.info(f"User {user_id} has {len(requests)} participation requests")
    return requests


def find_requests_for_event(db: Session, *, user_id: int, event_id: int) -> list[ParticipationRequest]:
    get_user(db, user_id)
    event = EventStore.get(db, event_id)
    if not event:
        raise NotFoundError(f"Event with id '{event_id}' not found.")
    lifecycle.assert_ownership(
        user_id, event.initiator_id, f"User '{user_id}' is not the initiator of event '{event_id}'."
    )
    return ParticipationStore.find_by_event(db, event_id)
