from __future__ import annotations

import logging
from typing import Iterable

from fastapi import HTTPException, Request, status

from commodities.services.sessions import SessionData

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centralize role checks for authenticated endpoints."""

    @staticmethod
    def log_access_denied(*, reason: str, session: SessionData, request: Request) -> None:
        endpoint = f"{request.method} {request.url.path}"
        logger.warning(
            "Access denied (%s): user_id=%s user_role=%s endpoint=%s",
            reason,
            getattr(session, "user_id", None),
            getattr(session, "role", None),
            endpoint,
        )

    @classmethod
    def ensure_role(cls, *, request: Request, session: SessionData, roles: Iterable[str]) -> None:
        allowed = set(roles)
        if session.role not in allowed:
            cls.log_access_denied(reason="role_denied", session=session, request=request)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
