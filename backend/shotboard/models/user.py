from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from shotboard.db.base import Base


class User(Base):
    __tablename__ = "users"

    email = Column(String(255), primary_key=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    __tablename__ = "user_sessions"

    token = Column(String(128), primary_key=True, index=True)

    # null for the superuser, who has no users row
    email = Column(String(255), ForeignKey("users.email", ondelete="CASCADE"), nullable=True, index=True)
    identity = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")
