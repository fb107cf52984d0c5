from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from commodities.core.database import get_db
from commodities.deps import require_role
from commodities.models.user import ROLE_MANAGER
from commodities.services.inventory import build_dashboard_stats
from commodities.services.sessions import SessionData

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    _session: SessionData = Depends(require_role([ROLE_MANAGER])),
):
    return build_dashboard_stats(db)
