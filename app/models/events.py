import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base
from app.models.categories import Category
from app.models.users import User


class EventState(str, enum.Enum):
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    CANCELED = "CANCELED"


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    annotation: Mapped[str] = mapped_column(String(2000), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)
    initiator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    # location is owned by the event
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lon: Mapped[float] = mapped_column(Float, nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_on: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    published_on: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    participant_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    request_moderation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    state: Mapped[str] = mapped_column(String(16), nullable=False, default=EventState.PENDING.value)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    confirmed_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped[Category] = relationship(lazy="joined")
    initiator: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint("participant_limit >= 0", name="check_participant_limit_non_negative"),
        CheckConstraint("confirmed_requests >= 0", name="check_confirmed_non_negative"),
        CheckConstraint(
            "participant_limit = 0 OR confirmed_requests <= participant_limit",
            name="check_confirmed_within_limit",
        ),
        Index("ix_events_state_date", "state", "event_date"),
        Index("ix_events_initiator", "initiator_id"),
    )

    @property
    def location(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, state={self.state}, "
            f"confirmed={self.confirmed_requests}/{self.participant_limit})>"
        )
