from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.events import EventShortOut


class NewCompilation(BaseModel):
    title: str = Field(min_length=1, max_length=50)
    pinned: bool = False
    events: list[int] = Field(default_factory=list)


class UpdateCompilation(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=50)
    pinned: Optional[bool] = None
    events: Optional[list[int]] = None


class CompilationOut(BaseModel):
    id: int
    title: str
    pinned: bool
    events: list[EventShortOut]

    class Config:
        from_attributes = True
