"""
Pytest configuration and shared fixtures.
"""

import os

# La app crea tablas al importarse: que no toque un fichero real
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base
from app.db.models import _all  # noqa: F401
from app.db.models.competitor import Competitor
from app.db.models.event import Event
from app.db.models.season import Season
from app.db.models.user import User


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (in-memory database, no HTTP)")
    config.addinivalue_line("markers", "integration: Integration tests through the FastAPI app")


@pytest.fixture
def db():
    """Sesión contra una base SQLite en memoria, nueva en cada test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def season(db):
    season = Season(year=2024, name="Season 7")
    db.add(season)
    db.commit()
    return season


@pytest.fixture
def event(db, season):
    event = Event(season_id=season.id, track_name="Silverstone")
    db.add(event)
    db.commit()
    return event


@pytest.fixture
def competitors(db):
    roster = [
        Competitor(name="Alice Racer", team="Red", car_number=1, platform_id="76561198000000001"),
        Competitor(name="Bob Driver", team="Blue", car_number=2, platform_id="76561198000000002"),
        Competitor(name="Carol Pilot", team="Green", car_number=3),
    ]
    db.add_all(roster)
    db.commit()
    return roster


@pytest.fixture
def admin_user(db):
    user = User(email="steward@example.com", username="steward1", hashed_password="x", role="admin")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def make_result():
    def _make(name, position, total_time_ms, **overrides):
        row = {
            "name": name,
            "position": position,
            "gridPosition": position,
            "lapCount": 52,
            "bestLapMs": 88000 + position,
            "sectorMs": [28000, 30000, 30000],
            "totalTimeMs": total_time_ms,
            "inSessionPenaltySeconds": 0,
            "warnings": 0,
            "status": 3,
            "fastestLap": False,
            "pole": False,
            "points": 0,
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def make_payload(make_result):
    """Payload de sesión decodificada en la forma que envía el listener."""

    def _make(track="Silverstone", kind="race", results=None, **overrides):
        payload = {
            "track": track,
            "sessionKind": kind,
            "results": results or [
                make_result("Alice Racer", 1, 5_400_000, driverId=11, platformId=76561198000000001, points=25),
                make_result("Bob Driver", 2, 5_401_000, driverId=12, platformId="76561198000000002", points=18),
            ],
        }
        payload.update(overrides)
        return payload

    return _make
