# ================================
# TEST FIXTURES (tests/conftest.py)
# ================================

"""
Pytest configuration and fixtures.

Every test gets its own SQLite database file, so two sessions can
interleave (needed for the concurrency tests) without touching any real
database.
"""

import os
from datetime import datetime, timedelta, timezone

# Set test settings BEFORE importing app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import uuid
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.core.database import get_db, enable_sqlite_foreign_keys
from app.core.security import create_access_token
from app.dependencies import get_notifier
from app.main import app as fastapi_app
from app.models import Base, Profile, Property
from app.services.notification_service import Notifier


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier(session_factory):
    """Notifier writing into the test database"""
    return Notifier(session_factory=session_factory)


@pytest.fixture(autouse=True)
def default_policy(monkeypatch):
    monkeypatch.setattr(settings, "OVERSELL_POLICY", "reject")
    monkeypatch.setattr(settings, "TRANSITION_MAX_ATTEMPTS", 3)


# ================================
# SEED DATA
# ================================

def _make_profile(db, role: str, email: str, name: str, is_active: bool = True) -> Profile:
    profile = Profile(id=uuid.uuid4(), email=email, name=name, role=role, is_active=is_active)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def admin(db):
    return _make_profile(db, "admin", "admin@nam3land.test", "Ada Admin")


@pytest.fixture
def agent(db):
    return _make_profile(db, "agent", "agent@nam3land.test", "Alex Agent")


@pytest.fixture
def other_agent(db):
    return _make_profile(db, "agent", "agent2@nam3land.test", "Sam Agent")


@pytest.fixture
def customer(db):
    return _make_profile(db, "customer", "customer@nam3land.test", "Chris Customer")


@pytest.fixture
def other_customer(db):
    return _make_profile(db, "customer", "customer2@nam3land.test", "Robin Customer")


@pytest.fixture
def make_property(db, agent):
    """Factory: make_property(units_total=2) etc."""

    def _make(name="Sunset Villa", units_total=None, units_available=None, agent_id="default", status=None):
        if agent_id == "default":
            agent_id = agent.id
        if units_total is not None and units_available is None:
            units_available = units_total
        if status is None:
            status = "reserved" if units_available == 0 else "available"

        property = Property(
            id=uuid.uuid4(),
            name=name,
            location="Downtown",
            agent_id=agent_id,
            units_total=units_total,
            units_available=units_available,
            status=status,
            version=1
        )
        db.add(property)
        db.commit()
        db.refresh(property)
        return property

    return _make


@pytest.fixture
def future_time():
    return datetime.now(timezone.utc) + timedelta(days=3)


# ================================
# API CLIENT
# ================================

@pytest.fixture
def client(session_factory, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier

    yield TestClient(fastapi_app)

    fastapi_app.dependency_overrides.clear()


def auth_headers(profile: Profile) -> dict:
    token = create_access_token({"sub": str(profile.id), "role": profile.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    """headers(profile) -> Authorization header for that profile"""
    return auth_headers
