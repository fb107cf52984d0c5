import os
import tempfile

# Configuration is read at import time, so pin it before anything imports the package.
_DATA_DIR = tempfile.mkdtemp(prefix="commodities-tests-")
os.environ["ENV"] = "test"
os.environ["DATA_DIR"] = _DATA_DIR
os.environ["DATABASE_URL"] = f"sqlite:///{_DATA_DIR}/database.sqlite"
os.environ["SEED_DEMO_DATA"] = "0"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_BACKEND"] = "memory"

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from commodities.core.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from commodities.services.seed import seed_demo_data  # noqa: E402
from commodities.services.sessions import InMemorySessionStore, get_session_store  # noqa: E402
from tests.fixtures_data import KEEPER_CREDENTIALS, MANAGER_CREDENTIALS, ManualClock  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_demo_data(session)
    yield session
    session.close()


@pytest.fixture
def clock():
    return ManualClock(datetime.now(timezone.utc).replace(tzinfo=None))


@pytest.fixture
def session_store(clock):
    return InMemorySessionStore(ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def client(monkeypatch, db, session_factory, session_store):
    from commodities import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[get_session_store] = lambda: session_store
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


def _login(client: TestClient, credentials: dict) -> dict:
    response = client.post("/auth/login", json=credentials)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def manager_headers(client):
    return _login(client, MANAGER_CREDENTIALS)


@pytest.fixture
def keeper_headers(client):
    return _login(client, KEEPER_CREDENTIALS)
