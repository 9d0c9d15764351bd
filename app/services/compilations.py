import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.compilations import Compilation
from app.schemas.compilations import NewCompilation, UpdateCompilation
from app.services.exceptions import NotFoundError
from app.services.repositories import EventStore

logger = logging.getLogger(__name__)


def get_compilation(db: Session, compilation_id: int) -> Compilation:
    compilation = db.get(Compilation, compilation_id)
    if not compilation:
        raise NotFoundError(f"Compilation with id '{compilation_id}' not found.")
    return compilation


def add_compilation(db: Session, payload: NewCompilation) -> Compilation:
    compilation = Compilation(
        title=payload.title,
        pinned=payload.pinned,
        events=EventStore.find_by_ids(db, payload.events),
    )
    with transaction(db):
        db.add(compilation)
    db.refresh(compilation)
    logger.info(f"Compilation {compilation.id} saved with {len(compilation.events)} events")
    return compilation


def update_compilation(db: Session, compilation_id: int, payload: UpdateCompilation) -> Compilation:
    compilation = get_compilation(db, compilation_id)
    with transaction(db):
        if payload.events is not None:
            compilation.events = EventStore.find_by_ids(db, payload.events)
        if payload.title is not None:
            compilation.title = payload.title
        if payload.pinned is not None:
            compilation.pinned = payload.pinned
    db.refresh(compilation)
    logger.info(f"Compilation {compilation_id} updated")
    return compilation


def delete_compilation(db: Session, compilation_id: int) -> None:
    compilation = get_compilation(db, compilation_id)
    with transaction(db):
        db.delete(compilation)
    logger.info(f"Compilation {compilation_id} deleted")


def find_compilations(db: Session, pinned: Optional[bool], offset: int, size: int) -> list[Compilation]:
    stmt = select(Compilation)
    if pinned is not None:
        stmt = stmt.where(Compilation.pinned == pinned)
    compilations = list(db.scalars(stmt.order_by(Compilation.id).offset(offset).limit(size)))
    logger.info(f"Compilations requested: pinned={pinned}, from={offset}, size={size}, found={len(compilations)}")
    return compilations
