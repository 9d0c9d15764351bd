import enum
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database.db import Base
from app.models.events import Event
from app.models.users import User


class ParticipationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


class ParticipationRequest(Base):
    __tablename__ = "participation_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    requester_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ParticipationStatus.PENDING.value)
    created: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    requester: Mapped[User] = relationship()
    event: Mapped[Event] = relationship()

    __table_args__ = (
        # one active request per requester and event
        Index(
            "uq_participation_active_request",
            "requester_id",
            "event_id",
            unique=True,
            sqlite_where=text("status != 'CANCELED'"),
            postgresql_where=text("status != 'CANCELED'"),
        ),
        Index("ix_participation_event", "event_id"),
    )

    def __repr__(self) -> str:
        return f"<ParticipationRequest(id={self.id}, requester={self.requester_id}, event={self.event_id}, status={self.status})>"
