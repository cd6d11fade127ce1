from typing import Optional

from sqlalchemy.orm import Session

from shotboard import models
from shotboard.services.auth import is_superuser


def team_emails(project: models.Project) -> set:
    team = (project.data or {}).get("team") or []
    return {member.get("email") for member in team if isinstance(member, dict)}


def can_access(project: models.Project, identity: Optional[str]) -> bool:
    """Owner, team members and the superuser may read, write and join a project."""
    if not identity:
        return False
    if is_superuser(identity):
        return True
    return project.owner == identity or identity in team_emails(project)


def can_join(db: Session, project_id: str, identity: Optional[str]) -> bool:
    project = db.get(models.Project, project_id)
    return project is not None and can_access(project, identity)
