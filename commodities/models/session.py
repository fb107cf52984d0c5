from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from commodities.core.database import Base


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String, primary_key=True)
    user_id = Column("userId", Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column("createdAt", DateTime, server_default=func.now())
    expires_at = Column("expiresAt", DateTime, nullable=False)
