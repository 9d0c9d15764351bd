from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.events import EventState
from app.schemas.categories import CategoryOut
from app.schemas.users import UserShortOut


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Location(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    class Config:
        from_attributes = True


# ---------- Event ----------
class NewEvent(BaseModel):
    title: str = Field(min_length=3, max_length=120)
    annotation: str = Field(min_length=20, max_length=2000)
    description: str = Field(min_length=20, max_length=7000)
    category: int = Field(ge=1)
    location: Location
    event_date: datetime
    paid: bool = False
    participant_limit: int = Field(default=0, ge=0)
    request_moderation: bool = True

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=120)
    annotation: Optional[str] = Field(None, min_length=20, max_length=2000)
    description: Optional[str] = Field(None, min_length=20, max_length=7000)
    category: Optional[int] = Field(None, ge=1)
    location: Optional[Location] = None
    event_date: Optional[datetime] = None
    paid: Optional[bool] = None
    participant_limit: Optional[int] = Field(None, ge=0)
    request_moderation: Optional[bool] = None

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_naive_utc(value)


class UpdateEventUserRequest(EventUpdate):
    state_action: Optional[Literal["SEND_TO_REVIEW", "CANCEL_REVIEW"]] = None


class UpdateEventAdminRequest(EventUpdate):
    state_action: Optional[Literal["PUBLISH_EVENT", "REJECT_EVENT"]] = None


class EventShortOut(BaseModel):
    id: int
    title: str
    annotation: str
    category: CategoryOut
    initiator: UserShortOut
    event_date: datetime
    paid: bool
    views: int
    confirmed_requests: int

    class Config:
        from_attributes = True


class EventFullOut(EventShortOut):
    description: str
    location: Location
    created_on: datetime
    published_on: Optional[datetime] = None
    participant_limit: int
    request_moderation: bool
    state: EventState
