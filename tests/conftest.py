from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from models import AdmissionStatus, Role, Team, User
from services.event_service import get_current_event


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of a single test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
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
def event(db):
    return get_current_event(db)


@pytest.fixture
def make_user(db):
    def _make_user(role=Role.PARTICIPANT, team=None, access_level="general", name=None):
        user = User(
            name=name or f"user-{uuid.uuid4().hex[:6]}",
            email=f"{uuid.uuid4().hex}@example.com",
            role=role,
            admission_status=AdmissionStatus.PENDING,
            access_level=access_level,
            team_id=team.id if team else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_team(db):
    def _make_team(name=None):
        team = Team(name=name or f"team-{uuid.uuid4().hex[:6]}")
        db.add(team)
        db.commit()
        db.refresh(team)
        return team
    return _make_team


@pytest.fixture
def client(session_factory) -> TestClient:
    """TestClient bound to the in-memory database; lifespan is not run."""
    import main

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()
