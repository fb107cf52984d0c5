from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func

from commodities.core.database import Base

ROLE_MANAGER = "Manager"
ROLE_STORE_KEEPER = "Store Keeper"
ROLES = (ROLE_MANAGER, ROLE_STORE_KEEPER)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('Manager', 'Store Keeper')", name="ck_users_role"),)

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column("password", String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # Manager | Store Keeper

    created_at = Column("createdAt", DateTime, server_default=func.now())
    updated_at = Column("updatedAt", DateTime, server_default=func.now(), onupdate=func.now())
