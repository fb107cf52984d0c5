from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String, Text, func

from commodities.core.database import Base

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
PRODUCT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)
DEFAULT_LOW_STOCK_THRESHOLD = 10


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("status IN ('active', 'inactive')", name="ck_products_status"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, unique=True, index=True, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False)
    status = Column(String, nullable=False, default=STATUS_ACTIVE)
    low_stock_threshold = Column(
        "lowStockThreshold", Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD
    )
    description = Column(Text, nullable=True)
    created_at = Column("createdAt", DateTime, server_default=func.now())
    updated_at = Column("updatedAt", DateTime, server_default=func.now(), onupdate=func.now())

    @property
    def is_low_stock(self) -> bool:
        return (self.stock or 0) <= (self.low_stock_threshold or 0)
