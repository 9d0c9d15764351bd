from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.models.events import EventState
from app.schemas.events import EventFullOut, UpdateEventAdminRequest
from app.services import events as event_service
from app.services.repositories import EventFilter

router = APIRouter(prefix="/admin/events", tags=["admin"])


@router.get("", response_model=list[EventFullOut])
def find_events(
    users: Optional[list[int]] = Query(None),
    states: Optional[list[EventState]] = Query(None),
    categories: Optional[list[int]] = Query(None),
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    search = EventFilter(
        users=users,
        states=states,
        categories=categories,
        range_start=range_start,
        range_end=range_end,
    )
    return event_service.search_events_admin(db, search, offset, size)


@router.patch("/{event_id}", response_model=EventFullOut)
def update_event(event_id: int, payload: UpdateEventAdminRequest, db: Session = Depends(get_db)):
    return event_service.update_event_by_admin(db, event_id=event_id, payload=payload)
