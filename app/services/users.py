import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.users import User
from app.schemas.users import NewUserRequest
from app.services.exceptions import ConflictError, NotFoundError
from app.services.repositories import EventStore, ParticipationStore

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User with id '{user_id}' not found.")
    return user


def create_user(db: Session, payload: NewUserRequest) -> User:
    user = User(name=payload.name, email=payload.email)
    try:
        with transaction(db):
            db.add(user)
    except IntegrityError as e:
        raise ConflictError(f"User with email '{payload.email}' already exists.") from e
    db.refresh(user)
    logger.info(f"User {user.id} created")
    return user


def get_users(db: Session, ids: Optional[Sequence[int]], offset: int, size: int) -> list[User]:
    stmt = select(User)
    if ids:
        stmt = stmt.where(User.id.in_(ids))
    users = list(db.scalars(stmt.order_by(User.id).offset(offset).limit(size)))
    logger.info(f"Users requested: ids={ids}, from={offset}, size={size}, found={len(users)}")
    return users


def delete_user(db: Session, user_id: int) -> None:
    """A user can only be removed once no event or participation request refers to them."""
    user = get_user(db, user_id)
    if EventStore.exists_for_initiator(db, user_id):
        raise ConflictError(f"User with id '{user_id}' still initiates events.")
    if ParticipationStore.exists_for_requester(db, user_id):
        raise ConflictError(f"User with id '{user_id}' still has participation requests.")
    with transaction(db):
        db.delete(user)
    logger.info(f"User {user_id} deleted")
