from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from commodities.models.product import Product
from commodities.services.activity_log import recent_activities


def count_low_stock(db: Session) -> int:
    return db.query(Product).filter(Product.stock <= Product.low_stock_threshold).count()


def total_inventory_value(db: Session) -> float:
    total = db.query(func.coalesce(func.sum(Product.stock * Product.price), 0.0)).scalar()
    return float(total or 0.0)


def category_counts(db: Session) -> Dict[str, int]:
    rows = (
        db.query(Product.category, func.count(Product.id))
        .group_by(Product.category)
        .order_by(Product.category.asc())
        .all()
    )
    return {category: int(count) for category, count in rows}


def build_dashboard_stats(db: Session) -> Dict[str, Any]:
    return {
        "totalProducts": db.query(func.count(Product.id)).scalar() or 0,
        "totalValue": f"{total_inventory_value(db):.2f}",
        "lowStockItems": count_low_stock(db),
        "categoryStats": category_counts(db),
        "recentActivities": recent_activities(db),
    }
