import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database.db import transaction
from app.models.categories import Category
from app.schemas.categories import CategoryIn
from app.services.exceptions import ConflictError, NotFoundError
from app.services.repositories import EventStore

logger = logging.getLogger(__name__)


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError(f"Category with id '{category_id}' not found.")
    return category


def add_category(db: Session, payload: CategoryIn) -> Category:
    category = Category(name=payload.name)
    try:
        with transaction(db):
            db.add(category)
    except IntegrityError as e:
        raise ConflictError(f"Category '{payload.name}' already exists.") from e
    db.refresh(category)
    logger.info(f"Category {category.id} saved")
    return category


def update_category(db: Session, category_id: int, payload: CategoryIn) -> Category:
    category = get_category(db, category_id)
    try:
        with transaction(db):
            category.name = payload.name
    except IntegrityError as e:
        raise ConflictError(f"Category '{payload.name}' already exists.") from e
    db.refresh(category)
    logger.info(f"Category {category_id} renamed to '{category.name}'")
    return category


def remove_category(db: Session, category_id: int) -> None:
    """A category can only be removed when no event refers to it."""
    category = get_category(db, category_id)
    if EventStore.exists_in_category(db, category_id):
        raise ConflictError(f"Category with id '{category_id}' still has events attached.")
    with transaction(db):
        db.delete(category)
    logger.info(f"Category {category_id} removed")


def find_categories(db: Session, offset: int, size: int) -> list[Category]:
    stmt = select(Category).order_by(Category.id).offset(offset).limit(size)
    return list(db.scalars(stmt))
