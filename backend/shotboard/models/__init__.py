from shotboard.db.base import Base
from .project import Project
from .user import User, UserSession

__all__ = ["Base", "Project", "User", "UserSession"]
