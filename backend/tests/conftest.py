"""Shared test configuration and fixtures.

Every test gets a fresh in-memory SQLite database; the app's `get_db`
dependency is overridden to use it.
"""

import os

# Must be set before the app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, timedelta
from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.session import get_db
from app.main import app
from app.services.factor_extractor import HistoricalRecord


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Session bound to a throwaway in-memory database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient wired to the test database."""

    def _get_test_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def make_series(
    end: date,
    days: int,
    occupancy: float = 50.0,
    hotel_id: str = "hotel-1",
    competitor_avg: Optional[float] = None,
    competitor_min: Optional[float] = None,
    competitor_max: Optional[float] = None,
) -> List[HistoricalRecord]:
    """`days` consecutive daily records ending on `end`, oldest first."""
    start = end - timedelta(days=days - 1)
    return [
        HistoricalRecord(
            hotel_id=hotel_id,
            date=start + timedelta(days=i),
            occupancy_rate=occupancy,
            competitor_avg_price=competitor_avg,
            competitor_min_price=competitor_min,
            competitor_max_price=competitor_max,
        )
        for i in range(days)
    ]


@pytest.fixture
def series_factory():
    return make_series
