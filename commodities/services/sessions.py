from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from commodities.core.config import SESSION_BACKEND, SESSION_TTL_HOURS
from commodities.core.database import SessionLocal
from commodities.models.session import UserSession
from commodities.models.user import User

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass
class SessionData:
    token: str
    user_id: int
    email: str
    role: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or _now())


class SessionStore(ABC):
    """Maps opaque bearer tokens to logged-in users."""

    def __init__(self, *, ttl: timedelta, clock: Callable[[], datetime] = _now) -> None:
        self.ttl = ttl
        self._clock = clock

    @abstractmethod
    def create(self, user: User) -> SessionData:
        """Issue a new token for the user."""

    @abstractmethod
    def get(self, token: str) -> Optional[SessionData]:
        """Return the live session for the token, dropping it if expired."""

    @abstractmethod
    def revoke(self, token: str) -> bool:
        """Forget a single token. Returns whether it existed."""

    @abstractmethod
    def revoke_user(self, user_id: int) -> int:
        """Forget every token of a user. Returns how many were dropped."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop expired sessions. Returns how many were dropped."""

    def _new_session(self, user: User) -> SessionData:
        now = self._clock()
        return SessionData(
            token=generate_token(),
            user_id=int(user.id),
            email=user.email,
            role=user.role,
            created_at=now,
            expires_at=now + self.ttl,
        )


class InMemorySessionStore(SessionStore):
    """Process-local sessions; everything is lost on restart."""

    def __init__(self, *, ttl: timedelta, clock: Callable[[], datetime] = _now) -> None:
        super().__init__(ttl=ttl, clock=clock)
        self._sessions: dict[str, SessionData] = {}
        self._lock = Lock()

    def create(self, user: User) -> SessionData:
        session = self._new_session(user)
        with self._lock:
            self._sessions[session.token] = session
        return session

    def get(self, token: str) -> Optional[SessionData]:
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self._clock()):
                del self._sessions[token]
                return None
            return session

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def revoke_user(self, user_id: int) -> int:
        with self._lock:
            tokens = [token for token, session in self._sessions.items() if session.user_id == user_id]
            for token in tokens:
                del self._sessions[token]
        return len(tokens)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            tokens = [token for token, session in self._sessions.items() if session.is_expired(now)]
            for token in tokens:
                del self._sessions[token]
        return len(tokens)


class DatabaseSessionStore(SessionStore):
    """Sessions kept in the ``sessions`` table so they survive restarts."""

    def __init__(
        self,
        *,
        session_factory: sessionmaker,
        ttl: timedelta,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        super().__init__(ttl=ttl, clock=clock)
        self._session_factory = session_factory

    def create(self, user: User) -> SessionData:
        session = self._new_session(user)
        db: Session = self._session_factory()
        try:
            db.add(
                UserSession(
                    token=session.token,
                    user_id=session.user_id,
                    created_at=session.created_at,
                    expires_at=session.expires_at,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        return session

    def get(self, token: str) -> Optional[SessionData]:
        db: Session = self._session_factory()
        try:
            row = (
                db.query(UserSession, User)
                .join(User, User.id == UserSession.user_id)
                .filter(UserSession.token == token)
                .first()
            )
            if row is None:
                return None
            stored, user = row
            if stored.expires_at <= self._clock():
                db.delete(stored)
                db.commit()
                return None
            return SessionData(
                token=stored.token,
                user_id=int(user.id),
                email=user.email,
                role=user.role,
                created_at=stored.created_at,
                expires_at=stored.expires_at,
            )
        finally:
            db.close()

    def revoke(self, token: str) -> bool:
        return self._delete(UserSession.token == token) > 0

    def revoke_user(self, user_id: int) -> int:
        return self._delete(UserSession.user_id == user_id)

    def purge_expired(self) -> int:
        return self._delete(UserSession.expires_at <= self._clock())

    def _delete(self, criterion) -> int:
        db: Session = self._session_factory()
        try:
            deleted = db.query(UserSession).filter(criterion).delete(synchronize_session=False)
            db.commit()
            return deleted
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def build_session_store(backend: str = SESSION_BACKEND) -> SessionStore:
    ttl = timedelta(hours=SESSION_TTL_HOURS)
    if backend == "database":
        logger.info("session store backend=database ttl_hours=%s", SESSION_TTL_HOURS)
        return DatabaseSessionStore(session_factory=SessionLocal, ttl=ttl)
    logger.info("session store backend=memory ttl_hours=%s", SESSION_TTL_HOURS)
    return InMemorySessionStore(ttl=ttl)


session_store: SessionStore = build_session_store()


def get_session_store() -> SessionStore:
    return session_store
