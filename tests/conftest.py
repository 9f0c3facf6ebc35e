import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from racketrank.api.deps import get_db
from racketrank.core.database import Base
from racketrank.models.cache import CountryRankingsCache, GeoCache
from racketrank.models.profile import Profile
from main import app


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="session")
def test_db():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()
    os.close(db_fd)
    os.unlink(db_path)

@pytest.fixture
def db_session(test_db):
    session = test_db()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture
def db_cleanup(db_session):
    for model in [Profile, GeoCache, CountryRankingsCache]:
        db_session.query(model).delete()
    db_session.commit()

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def add_profile(db_session):
    def _add(first_name="Test", last_name="Player", rating=1500.0,
             region=None, city=None, country=None, avatar_url=None):
        profile = Profile(
            first_name=first_name,
            last_name=last_name,
            rating=rating,
            region=region,
            city=city,
            country=country,
            avatar_url=avatar_url,
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile
    return _add

@pytest.fixture
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
