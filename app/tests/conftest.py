import itertools
from datetime import timedelta

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.core.config import settings
from app.database.db import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.categories import Category
from app.models.events import Event, EventState
from app.models.users import User
from app.services.lifecycle import utcnow

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Session:
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch: pytest.MonkeyPatch):
    """All event locks go through one in-process fake Redis."""
    server = fakeredis.FakeServer()
    redis = fakeredis.FakeRedis(server=server, decode_responses=True)
    monkeypatch.setattr("app.services.locks.get_redis_client", lambda: redis)
    return redis


@pytest.fixture
def redis_client(fake_redis):
    return fake_redis


@pytest.fixture(autouse=True)
def disable_stats(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "STATS_ENABLED", False)


@pytest.fixture
def user_factory(db_session: Session):
    counter = itertools.count(1)

    def make_user(name: str | None = None) -> User:
        n = next(counter)
        user = User(name=name or f"User {n}", email=f"user{n}@example.com")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return make_user


@pytest.fixture
def category(db_session: Session) -> Category:
    category = Category(name="Concerts")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def event_factory(db_session: Session, user_factory, category: Category):
    def make_event(
        initiator: User | None = None,
        state: EventState = EventState.PUBLISHED,
        participant_limit: int = 0,
        request_moderation: bool = True,
        confirmed_requests: int = 0,
        paid: bool = False,
        title: str = "Open air concert",
        days_ahead: int = 7,
    ) -> Event:
        now = utcnow()
        event = Event(
            title=title,
            annotation="An evening of live music in the park",
            description="Bring a blanket, the concert starts at sunset and lasts three hours",
            category_id=category.id,
            initiator_id=(initiator or user_factory()).id,
            lat=55.75,
            lon=37.62,
            event_date=now + timedelta(days=days_ahead),
            created_on=now,
            published_on=now if state is EventState.PUBLISHED else None,
            paid=paid,
            participant_limit=participant_limit,
            request_moderation=request_moderation,
            state=state.value,
            views=0,
            confirmed_requests=confirmed_requests,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return make_event
