import os

# Must be set before db.session is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from core.deps import get_current_user
from db.session import get_session
from main import app
from models.facility import FacilityConfigurationWrite
from models.user import User, UserRole
from services.facility_service import FacilityService
from utils import datetime_helpers
from utils.geofence import Coordinate

NYC_CENTER = Coordinate(latitude=40.7128, longitude=-74.0060)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _make_user(session, uid, role, name, department):
    user = User(
        id=uid,
        email=f"{uid}@hospital.test",
        display_name=name,
        role=role,
        department=department,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def worker(session):
    return _make_user(session, "worker-1", UserRole.WORKER, "Wendy Nurse", "ICU")


@pytest.fixture
def other_worker(session):
    return _make_user(session, "worker-2", UserRole.WORKER, "Omar Orderly", "ER")


@pytest.fixture
def manager(session):
    return _make_user(session, "manager-1", UserRole.MANAGER, "Maya Charge", "Admin")


@pytest.fixture
def facility(session):
    return FacilityService.replace(
        session,
        FacilityConfigurationWrite(
            name="Mercy General",
            address="1 Hospital Plaza, New York, NY",
            center_latitude=NYC_CENTER.latitude,
            center_longitude=NYC_CENTER.longitude,
            perimeter_radius_km=2.0,
        ),
    )


class FixedClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock(monkeypatch):
    """Pins the server clock used for shift timestamps and analytics."""
    fixed = FixedClock(datetime(2026, 3, 10, 18, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(datetime_helpers, "utc_now", fixed)
    return fixed


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Act as the given user for subsequent requests."""

    def _login(user):
        caller = {
            "uid": user.id,
            "name": user.display_name,
            "email": user.email,
            "role": user.role.value,
            "department": user.department,
        }
        app.dependency_overrides[get_current_user] = lambda: caller
        return client

    return _login
