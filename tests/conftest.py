import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("AUTO_CREATE_DB", "false")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldops.config import settings
from fieldops.db import Base, get_store
from fieldops.main import app
from fieldops.models import models  # noqa: F401
from fieldops.services.time_rules import local_date_string
from fieldops.storage.sql_provider import SqlDocumentStore


@pytest.fixture()
def store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()
    try:
        yield SqlDocumentStore(session)
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def today() -> str:
    return local_date_string(datetime.now(timezone.utc), settings.tz_default)
