from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.schemas.categories import CategoryIn, CategoryOut
from app.services import categories as category_service

admin_router = APIRouter(prefix="/admin/categories", tags=["admin"])
router = APIRouter(prefix="/categories", tags=["categories"])


@admin_router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def add_category(payload: CategoryIn, db: Session = Depends(get_db)):
    return category_service.add_category(db, payload)


@admin_router.patch("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryIn, db: Session = Depends(get_db)):
    return category_service.update_category(db, category_id, payload)


@admin_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(category_id: int, db: Session = Depends(get_db)):
    category_service.remove_category(db, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[CategoryOut])
def find_categories(
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    return category_service.find_categories(db, offset, size)


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return category_service.get_category(db, category_id)
