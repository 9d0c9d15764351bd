from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.participation import ParticipationRequestOut
from app.services import admission

router = APIRouter(prefix="/users/{user_id}/requests", tags=["requests"])


@router.post("", response_model=ParticipationRequestOut, status_code=status.HTTP_201_CREATED)
def request_participation(user_id: int, event_id: int = Query(ge=1), db: Session = Depends(get_db)):
    return admission.request_participation(db, user_id=user_id, event_id=event_id)


@router.get("", response_model=list[ParticipationRequestOut])
def find_own_requests(user_id: int, db: Session = Depends(get_db)):
    return admission.find_requests_by_user(db, user_id)


@router.patch("/{request_id}/cancel", response_model=ParticipationRequestOut)
def cancel_request(user_id: int, request_id: int, db: Session = Depends(get_db)):
    return admission.cancel_request(db, user_id=user_id, request_id=request_id)
