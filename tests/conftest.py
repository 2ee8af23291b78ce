import os

# 테스트는 MySQL 대신 메모리 SQLite 사용
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timelog.database import Base, get_db
from timelog.main import app
from timelog.models.app_config import AppConfig, CONFIG_KEY


@pytest.fixture
def db_session():
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
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def configure(db_session):
    def _configure(**fields):
        row = AppConfig(key=CONFIG_KEY, **fields)
        db_session.merge(row)
        db_session.commit()
    return _configure


@pytest.fixture
def add_entry(client):
    return lambda *args, **kwargs: _add_entry(client, *args, **kwargs)


def _add_entry(client, start, activity="写代码", date="2024-01-01", **extra):
    h, m = map(int, start.split(":"))
    end_minutes = h * 60 + m + 30
    body = {
        "date": date,
        "startTime": start,
        "endTime": f"{end_minutes // 60:02d}:{end_minutes % 60:02d}",
        "activity": activity,
        "thought": extra.pop("thought", None),
    }
    body.update(extra)
    resp = client.post("/api/entries", json=body)
    assert resp.status_code in (200, 201), resp.text
    return resp.json()["data"]
