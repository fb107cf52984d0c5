from datetime import timedelta

import pytest

from commodities.models.session import UserSession
from commodities.models.user import User
from commodities.services.sessions import DatabaseSessionStore


@pytest.fixture
def session_store(session_factory):
    return DatabaseSessionStore(session_factory=session_factory, ttl=timedelta(hours=24))


def test_login_persists_session_row(client, db, manager_headers):
    assert db.query(UserSession).count() == 1
    assert client.get("/auth/me", headers=manager_headers).status_code == 200


def test_logout_deletes_session_row(client, db, manager_headers):
    client.post("/auth/logout", headers=manager_headers)

    assert db.query(UserSession).count() == 0
    assert client.get("/auth/me", headers=manager_headers).status_code == 403


def test_deleted_user_sessions_are_removed(client, db, manager_headers, keeper_headers):
    keeper = db.query(User).filter(User.email == "keeper@slooze.xyz").first()

    response = client.delete(f"/users/{keeper.id}", headers=manager_headers)

    assert response.status_code == 200
    assert db.query(UserSession).filter(UserSession.user_id == keeper.id).count() == 0
    assert client.get("/products", headers=keeper_headers).status_code == 403
