from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from commodities.models.product import STATUS_ACTIVE, Product
from commodities.models.user import ROLE_MANAGER, ROLE_STORE_KEEPER, User
from commodities.services.passwords import hash_password

logger = logging.getLogger(__name__)
SEED_PREFIX = "[SEED]"

DEMO_USERS = (
    {"email": "manager@slooze.xyz", "password": "manager123", "name": "John Manager", "role": ROLE_MANAGER},
    {"email": "keeper@slooze.xyz", "password": "keeper123", "name": "Jane Keeper", "role": ROLE_STORE_KEEPER},
)

DEMO_PRODUCTS = (
    {
        "name": "Coffee Beans",
        "sku": "COF-001",
        "price": 25.99,
        "stock": 150,
        "category": "Beverages",
        "low_stock_threshold": 20,
        "description": "Premium Colombian coffee beans",
    },
    {
        "name": "Wheat Flour",
        "sku": "WHT-002",
        "price": 45.50,
        "stock": 200,
        "category": "Grains",
        "low_stock_threshold": 50,
        "description": "High-quality wheat flour for baking",
    },
    {
        "name": "Crude Oil",
        "sku": "OIL-003",
        "price": 75.30,
        "stock": 500,
        "category": "Energy",
        "low_stock_threshold": 100,
        "description": "Light sweet crude oil",
    },
    {
        "name": "Gold",
        "sku": "GLD-004",
        "price": 1850.00,
        "stock": 5,
        "category": "Precious Metals",
        "low_stock_threshold": 10,
        "description": "24k gold bullion",
    },
    {
        "name": "Cotton",
        "sku": "COT-005",
        "price": 85.20,
        "stock": 300,
        "category": "Textiles",
        "low_stock_threshold": 50,
        "description": "Premium cotton for textile production",
    },
)


def seed_demo_data(db: Session) -> bool:
    """Insert the demo accounts and products into an empty database.

    Returns False without touching anything when users already exist.
    """
    user_count = db.query(User).count()
    if user_count:
        logger.info("%s skipped existing_user_count=%s", SEED_PREFIX, user_count)
        return False

    for entry in DEMO_USERS:
        db.add(
            User(
                email=entry["email"],
                password_hash=hash_password(entry["password"]),
                name=entry["name"],
                role=entry["role"],
            )
        )
    for entry in DEMO_PRODUCTS:
        db.add(Product(status=STATUS_ACTIVE, **entry))

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("%s failed", SEED_PREFIX)
        raise

    logger.info(
        "%s inserted users=%s products=%s",
        SEED_PREFIX,
        len(DEMO_USERS),
        len(DEMO_PRODUCTS),
    )
    return True
