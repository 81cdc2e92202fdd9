import os

# Settings are read when the app module is imported; pin them before that happens.
os.environ["DATABASE_URL"] = "sqlite:///./unused-test.sqlite"
os.environ["OBS_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["JWT_SECRET"] = "test-secret-for-playlist-service-tokens"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from playlist_service.core.config import get_settings
from playlist_service.core.security import create_access_token
from playlist_service.db.init_db import create_all_tables
from playlist_service.db.session import build_engine
from tests.support import factories as test_factories

get_settings.cache_clear()


@pytest.fixture
def engine(tmp_path):
    """Per-test SQLite file database configured like a production SQLite engine."""
    db_path = tmp_path / "test.sqlite"
    eng = build_engine(f"sqlite:///{db_path.as_posix()}")
    create_all_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    # Test-side sessions keep loaded attributes after commit so reading ids never reopens a transaction.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    test_factories.set_session(session)
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        test_factories.reset_session()


@pytest.fixture
def factories(db):
    yield test_factories


@pytest.fixture
def client(engine):
    from playlist_service.api.deps import get_db
    from playlist_service.api.main import app

    app_sessions = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

    def _override_get_db():
        session = app_sessions()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}

    return _headers
