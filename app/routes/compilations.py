from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.db import get_db
from app.schemas.compilations import CompilationOut, NewCompilation, UpdateCompilation
from app.services import compilations as compilation_service

admin_router = APIRouter(prefix="/admin/compilations", tags=["admin"])
router = APIRouter(prefix="/compilations", tags=["compilations"])


@admin_router.post("", response_model=CompilationOut, status_code=status.HTTP_201_CREATED)
def add_compilation(payload: NewCompilation, db: Session = Depends(get_db)):
    return compilation_service.add_compilation(db, payload)


@admin_router.patch("/{compilation_id}", response_model=CompilationOut)
def update_compilation(compilation_id: int, payload: UpdateCompilation, db: Session = Depends(get_db)):
    return compilation_service.update_compilation(db, compilation_id, payload)


@admin_router.delete("/{compilation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_compilation(compilation_id: int, db: Session = Depends(get_db)):
    compilation_service.delete_compilation(db, compilation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[CompilationOut])
def find_compilations(
    pinned: Optional[bool] = None,
    offset: int = Query(0, ge=0, alias="from"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0),
    db: Session = Depends(get_db),
):
    return compilation_service.find_compilations(db, pinned, offset, size)


@router.get("/{compilation_id}", response_model=CompilationOut)
def get_compilation(compilation_id: int, db: Session = Depends(get_db)):
    return compilation_service.get_compilation(db, compilation_id)
