import os

# Must be set before leadpilot.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.pop("ADMIN_API_TOKEN", None)
os.environ.pop("APIFY_TOKEN", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leadpilot.core.database import Base, get_db
from leadpilot.core.store import RecordStore
from leadpilot.models import Lead


@pytest.fixture
def engine():
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
def store(db):
    return RecordStore(db)


@pytest.fixture
def make_lead(store):
    """Creates and commits a lead; keyword args override the defaults."""
    def _make(**fields):
        fields.setdefault("name", "Dana Reyes")
        fields.setdefault("company", "Acme Labs")
        fields.setdefault("stage", "new")
        with store.transaction():
            lead = store.create(Lead, **fields)
        return lead
    return _make


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from leadpilot.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
