#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from commodities.core.database import SessionLocal, engine  # noqa: E402
from commodities.models.user import ROLE_MANAGER, ROLES  # noqa: E402
from commodities.services.users import ensure_users_table, upsert_user  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update an inventory user.")
    parser.add_argument("--email", required=True, help="User email")
    parser.add_argument("--password", help="User password (required for new users)")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--role", default=ROLE_MANAGER, choices=ROLES, help="User role")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        ensure_users_table(engine)
    except RuntimeError as exc:
        print(str(exc))
        return 1

    db = SessionLocal()
    try:
        user, created = upsert_user(
            db,
            email=args.email,
            name=args.name,
            role=args.role,
            password=args.password,
        )
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()

    action = "created" if created else "updated"
    print(f"User {action}: id={user.id} email={user.email} role={user.role}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
