from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from commodities.models.user import ROLES, User
from commodities.services.passwords import hash_password, password_looks_hashed


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def user_to_dict(user: User, *, with_timestamps: bool = False) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }
    if with_timestamps:
        data["createdAt"] = user.created_at.isoformat() if user.created_at else None
        data["updatedAt"] = user.updated_at.isoformat() if user.updated_at else None
    return data


def resolve_password_hash(password: str) -> str:
    if password_looks_hashed(password):
        return password
    return hash_password(password)


def ensure_users_table(engine: Engine) -> None:
    inspector = inspect(engine)
    if not inspector.has_table("users"):
        raise RuntimeError("Table users not found. Run `alembic upgrade head` first.")


def upsert_user(
    db: Session,
    *,
    email: str,
    name: str,
    role: str,
    password: str | None,
) -> tuple[User, bool]:
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")

    email = normalize_email(email)
    existing = find_user_by_email(db, email)
    if existing:
        existing.name = name
        existing.role = role
        if password:
            existing.password_hash = resolve_password_hash(password)
        db.commit()
        db.refresh(existing)
        return existing, False

    if not password:
        raise ValueError("A password is required to create a new user.")

    user = User(
        email=email,
        name=name,
        role=role,
        password_hash=resolve_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True
