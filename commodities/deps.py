# commodities/deps.py
from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from commodities.core.request_context import set_request_context
from commodities.services.authorization_service import AuthorizationService
from commodities.services.sessions import SessionData, SessionStore, get_session_store

# auto_error=False so a missing header maps to 401 instead of FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_session(
    request: Request,
    token: str = Depends(get_bearer_token),
    store: SessionStore = Depends(get_session_store),
) -> SessionData:
    """Resolve the bearer token to a live session or reject the request."""
    session = await run_in_threadpool(store.get, token)
    if session is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")

    request.state.session = session
    # Async so the user id lands in the request task context that sync endpoints copy.
    set_request_context(user_id=str(session.user_id))
    return session


def require_role(roles: Iterable[str]):
    allowed = tuple(roles)

    def _dependency(
        request: Request,
        session: SessionData = Depends(get_current_session),
    ) -> SessionData:
        AuthorizationService.ensure_role(request=request, session=session, roles=allowed)
        return session

    return _dependency
