from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON

from shotboard.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True, index=True)
    owner = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="Untitled Project")

    is_favorite = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)

    # bumped on every save; only checked when a client sends expectedVersion
    version = Column(Integer, nullable=False, default=0)

    # script, setups, schedule, team and production lists, always written whole
    data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
