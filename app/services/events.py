"""
Event operations for initiators, administrators and the public.

Updates run under event_lock because they may change the participant limit
or the moderation flag that admission control reads.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from kombu.exceptions import OperationalError as BrokerError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import transaction
from app.models.events import Event, EventState
from app.schemas.events import EventUpdate, NewEvent, UpdateEventAdminRequest, UpdateEventUserRequest
from app.services import lifecycle
from app.services.categories import get_category
from app.services.exceptions import NotFoundError
from app.services.lifecycle import Actor, StateAction
from app.services.locks import event_lock
from app.services.repositories import EventFilter, EventStore
from app.services.stats import DATE_FORMAT, StatsClient
from app.services.users import get_user
from app.tasks import record_hit_task

logger = logging.getLogger(__name__)


def get_event(db: Session, event_id: int, for_update: bool = False) -> Event:
    event = EventStore.get(db, event_id, for_update=for_update)
    if not event:
        raise NotFoundError(f"Event with id '{event_id}' not found.")
    return event


def _collect_changes(db: Session, payload: EventUpdate) -> dict[str, Any]:
    data = payload.model_dump(exclude_unset=True, exclude={"state_action"})
    changes: dict[str, Any] = {}
    for name, value in data.items():
        if value is None:
            continue
        if name == "category":
            changes["category_id"] = get_category(db, value).id
        elif name == "location":
            changes["lat"] = value["lat"]
            changes["lon"] = value["lon"]
        else:
            changes[name] = value
    return changes


def create_event(db: Session, *, user_id: int, payload: NewEvent, now: Optional[datetime] = None) -> Event:
    now = now or lifecycle.utcnow()
    initiator = get_user(db, user_id)
    category = get_category(db, payload.category)
    lifecycle.validate_event_date(payload.event_date, now)

    event = Event(
        title=payload.title,
        annotation=payload.annotation,
        description=payload.description,
        category_id=category.id,
        initiator_id=initiator.id,
        lat=payload.location.lat,
        lon=payload.location.lon,
        event_date=payload.event_date,
        created_on=now,
        paid=payload.paid,
        participant_limit=payload.participant_limit,
        request_moderation=payload.request_moderation,
        state=EventState.PENDING.value,
        views=0,
        confirmed_requests=0,
    )
    with transaction(db):
        EventStore.save(db, event)
    logger.info(f"Event {event.id} created by user {user_id}")
    return get_event(db, event.id)


def find_user_events(db: Session, user_id: int, offset: int, size: int) -> list[Event]:
    get_user(db, user_id)
    events = EventStore.find_by_initiator(db, user_id, offset, size)
    logger.info(f"User {user_id} events requested, found {len(events)}")
    return events


def get_user_event(db: Session, *, user_id: int, event_id: int) -> Event:
    get_user(db, user_id)
    event = get_event(db, event_id)
    lifecycle.assert_ownership(user_id, event.initiator_id, f"User '{user_id}' is not the initiator of event '{event_id}'.")
    return event


def update_event_by_user(
    db: Session,
    *,
    user_id: int,
    event_id: int,
    payload: UpdateEventUserRequest,
    now: Optional[datetime] = None,
) -> Event:
    """Edit a not yet published event and optionally send it to review or withdraw it."""
    with event_lock(event_id):
        with transaction(db):
            get_user(db, user_id)
            event = get_event(db, event_id, for_update=True)
            lifecycle.assert_ownership(
                user_id, event.initiator_id, f"User '{user_id}' is not the initiator of event '{event_id}'."
            )
            lifecycle.assert_not_published(event)

            changes = _collect_changes(db, payload)
            if "event_date" in changes:
                lifecycle.validate_event_date(changes["event_date"], now)
            lifecycle.apply_field_updates(event, changes)

            if payload.state_action:
                lifecycle.apply_state_action(event, StateAction(payload.state_action), Actor.INITIATOR, now)
    logger.info(f"Event {event_id} updated by user {user_id}")
    return get_event(db, event_id)


def update_event_by_admin(
    db: Session,
    *,
    event_id: int,
    payload: UpdateEventAdminRequest,
    now: Optional[datetime] = None,
) -> Event:
    """Edit an event as administrator and optionally publish or reject it."""
    with event_lock(event_id):
        with transaction(db):
            event = get_event(db, event_id, for_update=True)

            changes = _collect_changes(db, payload)
            if changes:
                lifecycle.apply_field_updates(event, changes)

            if payload.state_action:
                lifecycle.apply_state_action(event, StateAction(payload.state_action), Actor.ADMIN, now)
    logger.info(f"Event {event_id} updated by administrator")
    return get_event(db, event_id)


def search_events_admin(db: Session, search: EventFilter, offset: int, size: int) -> list[Event]:
    events = EventStore.search(db, search, offset, size)
    logger.info(f"Administrator event search {search}: found {len(events)}")
    return events


def search_events_public(
    db: Session,
    search: EventFilter,
    offset: int,
    size: int,
    now: Optional[datetime] = None,
) -> list[Event]:
    """Only published events; without a date range only upcoming ones."""
    search = replace(search, states=[EventState.PUBLISHED], users=None)
    if search.range_start is None and search.range_end is None:
        search = replace(search, range_start=now or lifecycle.utcnow())
    events = EventStore.search(db, search, offset, size)
    logger.info(f"Public event search {search}: found {len(events)}")
    return events


def get_published_event(
    db: Session,
    event_id: int,
    stats_client: Optional[StatsClient] = None,
    now: Optional[datetime] = None,
) -> Event:
    """Return a published event with its view count refreshed from the statistics service."""
    event = get_event(db, event_id)
    if event.state != EventState.PUBLISHED.value:
        raise NotFoundError(f"Event with id '{event_id}' is not published. State: '{event.state}'")

    if stats_client is not None:
        uri = f"/events/{event_id}"
        views = stats_client.get_views(
            [uri],
            start=event.published_on or event.created_on,
            end=now or lifecycle.utcnow(),
            unique=True,
        )
        if uri in views and views[uri] != event.views:
            with transaction(db):
                event.views = views[uri]
    return event


def record_hit(uri: str, ip: str, now: Optional[datetime] = None) -> None:
    """Queue an endpoint hit for the statistics service."""
    if not settings.STATS_ENABLED:
        return
    timestamp = (now or lifecycle.utcnow()).strftime(DATE_FORMAT)
    try:
        record_hit_task.delay(settings.APP_NAME, uri, ip, timestamp)
    except BrokerError as e:
        logger.warning(f"Could not queue hit for {uri}: {e}")
