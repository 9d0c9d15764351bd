from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.schemas.users import NewUserRequest, UserOut
from app.services import users as user_service

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: NewUserRequest, db: Session = Depends(get_db)):
    return user_service.create_user(db, payload)


@router.get("", response_model=list[UserOut])
def get_users(
    ids: Optional[list[int]] = Query(None),
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    return user_service.get_users(db, ids, offset, size)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
