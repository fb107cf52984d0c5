from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from commodities.core.database import get_db
from commodities.core.errors import is_unique_violation
from commodities.deps import get_current_session, require_role
from commodities.models.product import DEFAULT_LOW_STOCK_THRESHOLD, STATUS_ACTIVE, Product
from commodities.models.user import ROLE_MANAGER, User
from commodities.services.activity_log import (
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_UPDATED,
    STOCK_ALERT,
    log_activity,
)
from commodities.services.sessions import SessionData

router = APIRouter(prefix="/products", tags=["products"])

logger = logging.getLogger(__name__)

SKU_CONFLICT_DETAIL = "Product with this SKU already exists"
SYSTEM_USER_NAME = "System"
# Largest value an SQLite INTEGER column can hold.
MAX_INTEGER = 2**63 - 1

ProductStatus = Literal["active", "inactive"]


class ProductPayload(BaseModel):
    """Body of both create and partial update. Create checks its required fields itself
    so the API can answer with one combined message."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0, le=MAX_INTEGER)
    category: Optional[str] = None
    status: Optional[ProductStatus] = None
    low_stock_threshold: Optional[int] = Field(
        None, ge=0, le=MAX_INTEGER, alias="lowStockThreshold"
    )
    description: Optional[str] = None


class ProductRead(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    stock: int
    category: str
    status: str
    lowStockThreshold: int
    description: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


def _product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku,
        "price": product.price,
        "stock": product.stock,
        "category": product.category,
        "status": product.status,
        "lowStockThreshold": product.low_stock_threshold,
        "description": product.description,
        "createdAt": product.created_at.isoformat() if product.created_at else None,
        "updatedAt": product.updated_at.isoformat() if product.updated_at else None,
    }


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def _sku_taken(db: Session, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def _actor_name(db: Session, session: SessionData) -> Optional[str]:
    user = db.query(User).filter(User.id == session.user_id).first()
    return user.name if user else session.email


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SKU_CONFLICT_DETAIL) from exc


@router.get("", response_model=List[ProductRead])
def list_products(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    product_status: Optional[ProductStatus] = Query(None, alias="status"),
    _session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    query = db.query(Product)

    term = _clean(search)
    if term:
        pattern = f"%{term.lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.sku).like(pattern),
                func.lower(Product.category).like(pattern),
            )
        )
    if category:
        query = query.filter(Product.category == category)
    if product_status:
        query = query.filter(Product.status == product_status)

    products = query.order_by(Product.created_at.desc(), Product.id.desc()).all()
    return [_product_to_dict(product) for product in products]


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    _session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _product_to_dict(_get_product_or_404(db, product_id))


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductPayload,
    session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
):
    name = _clean(payload.name)
    sku = _clean(payload.sku)
    category = _clean(payload.category)
    if not name or not sku or payload.price is None or payload.stock is None or not category:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, SKU, price, stock, and category are required",
        )

    if _sku_taken(db, sku):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SKU_CONFLICT_DETAIL)

    product = Product(
        name=name,
        sku=sku,
        price=payload.price,
        stock=payload.stock,
        category=category,
        status=payload.status or STATUS_ACTIVE,
        low_stock_threshold=(
            payload.low_stock_threshold
            if payload.low_stock_threshold is not None
            else DEFAULT_LOW_STOCK_THRESHOLD
        ),
        description=payload.description or None,
    )
    db.add(product)

    actor = _actor_name(db, session)
    log_activity(db, action=PRODUCT_CREATED, product_name=product.name, user_name=actor)
    if product.is_low_stock:
        log_activity(db, action=STOCK_ALERT, product_name=product.name, user_name=SYSTEM_USER_NAME)

    _commit_or_conflict(db)
    db.refresh(product)

    logger.info("product created product_id=%s sku=%s", product.id, product.sku)
    return _product_to_dict(product)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductPayload,
    session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, product_id)
    was_low_stock = product.is_low_stock
    changes = payload.model_dump(exclude_unset=True)

    sku = _clean(changes.get("sku"))
    if sku and sku != product.sku:
        if _sku_taken(db, sku, exclude_id=product.id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=SKU_CONFLICT_DETAIL)
        product.sku = sku

    # Blank or null values keep the stored value, except for the description.
    for field in ("name", "category"):
        value = _clean(changes.get(field))
        if value:
            setattr(product, field, value)
    for field in ("price", "stock", "status", "low_stock_threshold"):
        if changes.get(field) is not None:
            setattr(product, field, changes[field])
    if "description" in changes:
        product.description = changes["description"] or None

    product.updated_at = func.now()

    actor = _actor_name(db, session)
    log_activity(db, action=PRODUCT_UPDATED, product_name=product.name, user_name=actor)
    if product.is_low_stock and not was_low_stock:
        log_activity(db, action=STOCK_ALERT, product_name=product.name, user_name=SYSTEM_USER_NAME)

    _commit_or_conflict(db)
    db.refresh(product)

    logger.info("product updated product_id=%s fields=%s", product.id, sorted(changes))
    return _product_to_dict(product)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    session: SessionData = Depends(require_role([ROLE_MANAGER])),
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, product_id)

    db.delete(product)
    log_activity(db, action=PRODUCT_DELETED, product_name=product.name, user_name=_actor_name(db, session))
    db.commit()

    logger.info("product deleted product_id=%s", product_id)
    return {"message": "Product deleted successfully"}
