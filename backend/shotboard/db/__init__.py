from shotboard.db.base import Base
from shotboard.db.session import SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]
