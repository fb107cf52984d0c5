from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from commodities.core.database import get_db
from commodities.deps import require_role
from commodities.models.user import ROLE_MANAGER, User
from commodities.services.activity_log import USER_DELETED, log_activity
from commodities.services.sessions import SessionData, SessionStore, get_session_store
from commodities.services.users import user_to_dict

router = APIRouter(prefix="/users", tags=["users"])

logger = logging.getLogger(__name__)


class UserRead(BaseModel):
    id: int
    email: str
    name: str
    role: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


@router.get("", response_model=List[UserRead])
def list_users(
    _session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
):
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return [user_to_dict(entry, with_timestamps=True) for entry in users]


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    _session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user_to_dict(user, with_timestamps=True)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    if user_id == session.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    db.delete(target)
    log_activity(db, action=USER_DELETED, user_name=target.name)
    db.commit()

    revoked = store.revoke_user(user_id)
    logger.info("user deleted user_id=%s by=%s revoked_sessions=%s", user_id, session.user_id, revoked)
    return {"message": "User deleted successfully"}
