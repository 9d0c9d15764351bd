from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.schemas.events import EventFullOut, EventShortOut
from app.services import events as event_service
from app.services.exceptions import InvalidEventDateError
from app.services.repositories import EventFilter, EventSort
from app.services.stats import StatsClient, get_stats_client

router = APIRouter(prefix="/events", tags=["events"])


def get_stats() -> Optional[StatsClient]:
    if not settings.STATS_ENABLED:
        return None
    return get_stats_client()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "0.0.0.0"


@router.get("", response_model=list[EventShortOut])
def find_events(
    request: Request,
    text: Optional[str] = None,
    categories: Optional[list[int]] = Query(None),
    paid: Optional[bool] = None,
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    only_available: bool = False,
    sort: Optional[EventSort] = None,
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    if range_start and range_end and range_start > range_end:
        raise InvalidEventDateError("range_start must not be after range_end.")
    search = EventFilter(
        text=text,
        categories=categories,
        paid=paid,
        range_start=range_start,
        range_end=range_end,
        only_available=only_available,
        sort=sort,
    )
    events = event_service.search_events_public(db, search, offset, size)
    event_service.record_hit(request.url.path, _client_ip(request))
    return events


@router.get("/{event_id}", response_model=EventFullOut)
def get_event(
    event_id: int,
    request: Request,
    db: Session = Depends(get_db),
    stats: Optional[StatsClient] = Depends(get_stats),
):
    event = event_service.get_published_event(db, event_id, stats_client=stats)
    event_service.record_hit(request.url.path, _client_ip(request))
    return event
