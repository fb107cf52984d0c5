from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from commodities.core.config import APP_NAME

router = APIRouter(tags=["health"])


@router.get("/")
def root():
    return {"status": "ok"}


@router.get("/api/health")
def health():
    return {
        "status": "OK",
        "message": f"{APP_NAME} API is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
