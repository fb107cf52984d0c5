import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from commodities.deps import get_bearer_token, get_current_session, require_role
from commodities.services.authorization_service import AuthorizationService


def _build_request(path: str = "/products", method: str = "POST") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": {},
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


class _StubStore:
    def __init__(self, session=None):
        self.session = session

    def get(self, token):
        return self.session if token == "good-token" else None


def test_missing_bearer_token_is_401():
    with pytest.raises(HTTPException) as exc:
        get_bearer_token(credentials=None)

    assert exc.value.status_code == 401
    assert exc.value.detail == "Access token required"


def test_bearer_token_is_extracted():
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="abc")

    assert get_bearer_token(credentials=credentials) == "abc"


def test_unknown_token_is_403():
    with pytest.raises(HTTPException) as exc:
        asyncio.run(get_current_session(request=_build_request(), token="bad-token", store=_StubStore()))

    assert exc.value.status_code == 403
    assert exc.value.detail == "Invalid or expired token"


def test_valid_token_sets_request_state():
    session = SimpleNamespace(user_id=4, role="Manager")
    request = _build_request()

    resolved = asyncio.run(get_current_session(request=request, token="good-token", store=_StubStore(session)))

    assert resolved is session
    assert request.state.session is session


def test_require_role_denies_store_keeper_on_manager_route():
    session = SimpleNamespace(user_id=2, role="Store Keeper")
    dependency = require_role(["Manager"])

    with pytest.raises(HTTPException) as exc:
        dependency(request=_build_request(), session=session)

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_require_role_allows_manager():
    session = SimpleNamespace(user_id=1, role="Manager")
    dependency = require_role(["Manager"])

    assert dependency(request=_build_request(), session=session) is session


def test_authorization_service_role_match_is_exact():
    session = SimpleNamespace(user_id=1, role="manager")

    with pytest.raises(HTTPException) as exc:
        AuthorizationService.ensure_role(request=_build_request(), session=session, roles=["Manager"])

    assert exc.value.status_code == 403
