from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.models.participation import ParticipationStatus
from app.schemas.events import EventFullOut, EventShortOut, NewEvent, UpdateEventUserRequest
from app.schemas.participation import ParticipationRequestOut, StatusUpdateRequest, StatusUpdateResultOut
from app.services import admission
from app.services import events as event_service

router = APIRouter(prefix="/users/{user_id}/events", tags=["private"])


@router.post("", response_model=EventFullOut, status_code=status.HTTP_201_CREATED)
def add_event(user_id: int, payload: NewEvent, db: Session = Depends(get_db)):
    return event_service.create_event(db, user_id=user_id, payload=payload)


@router.get("", response_model=list[EventShortOut])
def find_user_events(
    user_id: int,
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    return event_service.find_user_events(db, user_id, offset, size)


@router.get("/{event_id}", response_model=EventFullOut)
def get_user_event(user_id: int, event_id: int, db: Session = Depends(get_db)):
    return event_service.get_user_event(db, user_id=user_id, event_id=event_id)


@router.patch("/{event_id}", response_model=EventFullOut)
def update_event(user_id: int, event_id: int, payload: UpdateEventUserRequest, db: Session = Depends(get_db)):
    return event_service.update_event_by_user(db, user_id=user_id, event_id=event_id, payload=payload)


@router.get("/{event_id}/requests", response_model=list[ParticipationRequestOut])
def find_event_requests(user_id: int, event_id: int, db: Session = Depends(get_db)):
    return admission.find_requests_for_event(db, user_id=user_id, event_id=event_id)


@router.patch("/{event_id}/requests", response_model=StatusUpdateResultOut)
def update_request_statuses(
    user_id: int,
    event_id: int,
    payload: StatusUpdateRequest,
    db: Session = Depends(get_db),
):
    return admission.update_request_statuses(
        db,
        user_id=user_id,
        event_id=event_id,
        request_ids=payload.request_ids,
        status=ParticipationStatus(payload.status),
    )
