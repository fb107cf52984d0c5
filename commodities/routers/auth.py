# commodities/routers/auth.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from commodities.core.database import get_db
from commodities.deps import get_bearer_token, get_current_session
from commodities.models.user import ROLES, User
from commodities.services.activity_log import USER_REGISTERED, log_activity
from commodities.services.passwords import hash_password, verify_password
from commodities.services.sessions import SessionData, SessionStore, get_session_store
from commodities.services.users import find_user_by_email, normalize_email, user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_email_adapter = TypeAdapter(EmailStr)


# Fields are optional so missing values get the API's own messages instead of
# pydantic's per-field errors.
class RegisterPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, db: Session = Depends(get_db)):
    # Passwords are taken as given; whitespace is a valid password character.
    if not payload.password or not all(
        value and value.strip() for value in (payload.email, payload.name, payload.role)
    ):
        raise HTTPException(status_code=400, detail="All fields are required")

    if payload.role not in ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")

    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )

    try:
        email = normalize_email(_email_adapter.validate_python(payload.email.strip()))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid email address") from exc

    if find_user_by_email(db, email):
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        name=payload.name.strip(),
        role=payload.role,
    )
    db.add(user)
    log_activity(db, action=USER_REGISTERED, user_name=user.name)
    db.commit()
    db.refresh(user)

    logger.info("user registered user_id=%s role=%s", user.id, user.role)
    return {"message": "User created successfully", "user": user_to_dict(user)}


@router.post("/login")
def login(
    payload: LoginPayload,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = find_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("login failed email=%s", normalize_email(payload.email))
        raise HTTPException(status_code=401, detail="Invalid credentials")

    session = store.create(user)
    logger.info("login succeeded user_id=%s role=%s", user.id, user.role)
    return {"message": "Login successful", "token": session.token, "user": user_to_dict(user)}


@router.post("/logout")
def logout(
    token: str = Depends(get_bearer_token),
    _session: SessionData = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    store.revoke(token)
    return {"message": "Logout successful"}


@router.get("/me")
def me(
    session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user_to_dict(user)
