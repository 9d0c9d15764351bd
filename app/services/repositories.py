"""
Repository layer over SQLAlchemy for events and participation requests.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.models.events import Event, EventState
from app.models.participation import ParticipationRequest, ParticipationStatus


class EventSort(str, enum.Enum):
    EVENT_DATE = "EVENT_DATE"
    VIEWS = "VIEWS"


@dataclass
class EventFilter:
    text: Optional[str] = None
    categories: Optional[Sequence[int]] = None
    users: Optional[Sequence[int]] = None
    states: Optional[Sequence[EventState]] = None
    paid: Optional[bool] = None
    range_start: Optional[datetime] = None
    range_end: Optional[datetime] = None
    only_available: bool = False
    sort: Optional[EventSort] = None


def escape_like(text: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# -------- Event store --------

class EventStore:
    @staticmethod
    def get(db: Session, event_id: int, for_update: bool = False) -> Optional[Event]:
        """Load an event with category and initiator; lock the row when asked."""
        stmt = select(Event).where(Event.id == event_id)
        if for_update:
            stmt = stmt.with_for_update(of=Event).execution_options(populate_existing=True)
        return db.scalars(stmt).unique().first()

    @staticmethod
    def save(db: Session, event: Event) -> Event:
        db.add(event)
        db.flush()
        return event

    @staticmethod
    def find_by_initiator(db: Session, initiator_id: int, offset: int, size: int) -> list[Event]:
        stmt = (
            select(Event)
            .where(Event.initiator_id == initiator_id)
            .order_by(Event.id)
            .offset(offset)
            .limit(size)
        )
        return list(db.scalars(stmt).unique())

    @staticmethod
    def find_by_ids(db: Session, event_ids: Sequence[int]) -> list[Event]:
        if not event_ids:
            return []
        return list(db.scalars(select(Event).where(Event.id.in_(event_ids))).unique())

    @staticmethod
    def exists_in_category(db: Session, category_id: int) -> bool:
        return db.scalars(select(Event.id).where(Event.category_id == category_id).limit(1)).first() is not None

    @staticmethod
    def exists_for_initiator(db: Session, initiator_id: int) -> bool:
        return db.scalars(select(Event.id).where(Event.initiator_id == initiator_id).limit(1)).first() is not None

    @staticmethod
    def search(db: Session, search: EventFilter, offset: int, size: int) -> list[Event]:
        stmt = select(Event)

        if search.text:
            pattern = f"%{escape_like(search.text.lower())}%"
            stmt = stmt.where(
                or_(
                    Event.annotation.ilike(pattern, escape="\\"),
                    Event.description.ilike(pattern, escape="\\"),
                )
            )
        if search.categories:
            stmt = stmt.where(Event.category_id.in_(search.categories))
        if search.users:
            stmt = stmt.where(Event.initiator_id.in_(search.users))
        if search.states:
            stmt = stmt.where(Event.state.in_([EventState(s).value for s in search.states]))
        if search.paid is not None:
            stmt = stmt.where(Event.paid == search.paid)
        if search.range_start is not None:
            stmt = stmt.where(Event.event_date >= search.range_start)
        if search.range_end is not None:
            stmt = stmt.where(Event.event_date <= search.range_end)
        if search.only_available:
            stmt = stmt.where(
                or_(Event.participant_limit == 0, Event.confirmed_requests < Event.participant_limit)
            )

        if search.sort == EventSort.VIEWS:
            stmt = stmt.order_by(Event.views.desc(), Event.id)
        elif search.sort == EventSort.EVENT_DATE:
            stmt = stmt.order_by(Event.event_date.desc(), Event.id)
        else:
            stmt = stmt.order_by(Event.id)

        return list(db.scalars(stmt.offset(offset).limit(size)).unique())


# -------- Participation store --------

class ParticipationStore:
    @staticmethod
    def get(db: Session, request_id: int) -> Optional[ParticipationRequest]:
        return db.get(ParticipationRequest, request_id)

    @staticmethod
    def save(db: Session, request: ParticipationRequest) -> ParticipationRequest:
        db.add(request)
        db.flush()
        return request

    @staticmethod
    def find_active(db: Session, requester_id: int, event_id: int) -> Optional[ParticipationRequest]:
        stmt = select(ParticipationRequest).where(
            ParticipationRequest.requester_id == requester_id,
            ParticipationRequest.event_id == event_id,
            ParticipationRequest.status != ParticipationStatus.CANCELED.value,
        )
        return db.scalars(stmt).first()

    @staticmethod
    def exists_for_requester(db: Session, requester_id: int) -> bool:
        stmt = select(ParticipationRequest.id).where(ParticipationRequest.requester_id == requester_id).limit(1)
        return db.scalars(stmt).first() is not None

    @staticmethod
    def find_by_requester(db: Session, requester_id: int) -> list[ParticipationRequest]:
        stmt = (
            select(ParticipationRequest)
            .where(ParticipationRequest.requester_id == requester_id)
            .order_by(ParticipationRequest.id)
        )
        return list(db.scalars(stmt))

    @staticmethod
    def find_by_event(db: Session, event_id: int) -> list[ParticipationRequest]:
        stmt = (
            select(ParticipationRequest)
            .where(ParticipationRequest.event_id == event_id)
            .order_by(ParticipationRequest.id)
        )
        return list(db.scalars(stmt))

    @staticmethod
    def find_by_ids(db: Session, request_ids: Sequence[int]) -> list[ParticipationRequest]:
        if not request_ids:
            return []
        stmt = select(ParticipationRequest).where(ParticipationRequest.id.in_(request_ids))
        return list(db.scalars(stmt))
