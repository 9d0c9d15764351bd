"""
Test database models and their constraints.
"""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.events import EventState
from app.models.participation import ParticipationRequest, ParticipationStatus
from app.models.users import User
from app.services.lifecycle import utcnow


class TestEventModel:
    """Test the Event model."""

    def test_create_event(self, event_factory):
        event = event_factory(participant_limit=10)

        assert event.id is not None
        assert event.state == EventState.PUBLISHED.value
        assert event.confirmed_requests == 0
        assert event.location == {"lat": 55.75, "lon": 37.62}
        assert event.category.name == "Concerts"
        assert event.initiator.name.startswith("User")

    def test_confirmed_cannot_exceed_limit(self, db_session: Session, event_factory):
        event = event_factory(participant_limit=2, confirmed_requests=2)

        event.confirmed_requests = 3
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_negative_limit_rejected(self, db_session: Session, event_factory):
        event = event_factory()

        event.participant_limit = -1
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_unlimited_event_has_no_ceiling(self, db_session: Session, event_factory):
        event = event_factory(participant_limit=0)

        event.confirmed_requests = 1000
        db_session.commit()
        db_session.refresh(event)

        assert event.confirmed_requests == 1000


class TestParticipationModel:
    """Test the ParticipationRequest model."""

    def _request(self, requester: User, event_id: int, status: ParticipationStatus) -> ParticipationRequest:
        return ParticipationRequest(
            requester_id=requester.id, event_id=event_id, status=status.value, created=utcnow()
        )

    def test_one_active_request_per_user_and_event(self, db_session: Session, user_factory, event_factory):
        event = event_factory()
        user = user_factory()
        db_session.add(self._request(user, event.id, ParticipationStatus.PENDING))
        db_session.commit()

        db_session.add(self._request(user, event.id, ParticipationStatus.CONFIRMED))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_canceled_requests_do_not_block(self, db_session: Session, user_factory, event_factory):
        event = event_factory()
        user = user_factory()
        db_session.add(self._request(user, event.id, ParticipationStatus.CANCELED))
        db_session.add(self._request(user, event.id, ParticipationStatus.CANCELED))
        db_session.add(self._request(user, event.id, ParticipationStatus.PENDING))
        db_session.commit()

        assert db_session.query(ParticipationRequest).count() == 3

    def test_relationships(self, db_session: Session, user_factory, event_factory):
        event = event_factory()
        user = user_factory()
        request = self._request(user, event.id, ParticipationStatus.PENDING)
        db_session.add(request)
        db_session.commit()
        db_session.refresh(request)

        assert request.event.id == event.id
        assert request.requester.id == user.id
        assert request.created is not None


def test_unique_user_email(db_session: Session):
    db_session.add(User(name="Ann", email="ann@example.com"))
    db_session.commit()

    db_session.add(User(name="Another Ann", email="ann@example.com"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_foreign_keys_enforced(db_session: Session, event_factory):
    event = event_factory()

    event.initiator_id = 9999
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
