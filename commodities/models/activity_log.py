from sqlalchemy import Column, DateTime, Integer, String, func

from commodities.core.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False)
    product_name = Column("productName", String, nullable=True)
    user_name = Column("userName", String, nullable=True)
    created_at = Column("createdAt", DateTime, server_default=func.now(), index=True)
