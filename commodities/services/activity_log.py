from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from commodities.models.activity_log import ActivityLog

RECENT_ACTIVITY_LIMIT = 10

PRODUCT_CREATED = "New Product Added"
PRODUCT_UPDATED = "Product Updated"
PRODUCT_DELETED = "Product Deleted"
STOCK_ALERT = "Stock Alert"
USER_REGISTERED = "User Registered"
USER_DELETED = "User Deleted"


def log_activity(
    db: Session,
    *,
    action: str,
    product_name: Optional[str] = None,
    user_name: Optional[str] = None,
) -> ActivityLog:
    entry = ActivityLog(action=action, product_name=product_name, user_name=user_name)
    db.add(entry)
    return entry


def recent_activities(db: Session, limit: int = RECENT_ACTIVITY_LIMIT) -> List[Dict[str, Any]]:
    rows = (
        db.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": entry.id,
            "action": entry.action,
            "product": entry.product_name,
            "user": entry.user_name,
            "timestamp": entry.created_at.isoformat() if entry.created_at else None,
        }
        for entry in rows
    ]
