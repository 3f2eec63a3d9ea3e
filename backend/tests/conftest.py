"""
Shared fixtures: an in-memory SQLite database, a session bound to it,
user factories and a TestClient wired to the same database.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mission_manager.database import Base, get_db
from mission_manager.models.db_models import Department, Role, UserDB
from mission_manager.services.missions import DelegationPolicy, MissionService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    """Insert a user directly. Credentials are not checked outside the login tests."""
    def _make(name=None, role=Role.EMPLOYEE, password_hash="not-a-real-hash"):
        user = UserDB(
            id=str(uuid4()),
            name=name or f"user-{uuid4().hex[:8]}",
            password_hash=password_hash,
            role=role,
            department=Department.TECHNICAL,
            phone="555-0100",
        )
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin", role=Role.ADMIN)


@pytest.fixture
def e1(make_user):
    return make_user("e1")


@pytest.fixture
def e2(make_user):
    return make_user("e2")


@pytest.fixture
def e3(make_user):
    return make_user("e3")


@pytest.fixture
def service(db):
    return MissionService(db, policy=DelegationPolicy())


@pytest.fixture
def safety_mission(service, admin, e1):
    """Mission with one 'Safety' category of two steps, assigned to e1."""
    return service.create_mission(
        {
            "subject": "Site inspection",
            "location": "Plant 3",
            "starttime": "2026-10-20T08:00:00Z",
            "endtime": "2026-10-20T16:00:00Z",
            "assignedto": e1.id,
            "checklist": [{"category": "Safety", "steps": ["check A", "check B"]}],
        },
        created_by=admin.id,
    )


@pytest.fixture
def client(session_factory):
    from mission_manager.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
