from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker import models  # noqa: F401  (registers tables)
from finance_tracker.database import Base, get_db
from finance_tracker.identity import Identity, Role
from finance_tracker.main import app
from finance_tracker.services.budget_service import get_today

TODAY = date(2024, 1, 20)

USER = Identity(user_id="user-1", role=Role.USER)
OTHER_USER = Identity(user_id="user-2", role=Role.USER)
ADMIN = Identity(user_id="admin-1", role=Role.ADMIN)


def headers(identity):
    return {"X-User-Id": identity.user_id, "X-User-Role": identity.role.value}


@pytest.fixture()
def db():
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


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
