from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.models.participation import ParticipationStatus


class ParticipationRequestOut(BaseModel):
    id: int
    event_id: int
    requester_id: int
    status: ParticipationStatus
    created: datetime

    class Config:
        from_attributes = True


class StatusUpdateRequest(BaseModel):
    request_ids: list[int] = Field(min_length=1)
    status: Literal["CONFIRMED", "REJECTED"]


class StatusUpdateResultOut(BaseModel):
    confirmed_requests: list[ParticipationRequestOut]
    rejected_requests: list[ParticipationRequestOut]

    class Config:
        from_attributes = True
