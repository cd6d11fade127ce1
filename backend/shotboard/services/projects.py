# shotboard/services/projects.py

import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from shotboard import models, schemas
from shotboard.services.access import can_access
from shotboard.services.auth import is_superuser

logger = logging.getLogger(__name__)


class VersionConflict(Exception):

    def __init__(self, project_id: str, current_version: int):
        super().__init__(f"Project {project_id} is at version {current_version}")
        self.project_id = project_id
        self.current_version = current_version


class ProjectStore:
    """
    Whole-document persistence for projects.

    Every save overwrites the stored blob in full; there is no field merge, so
    of two racing saves the one committed last wins.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, project_id: str) -> Optional[models.Project]:
        return self.db.get(models.Project, str(project_id))

    def list_for(self, identity: str) -> List[models.Project]:
        projects = (
            self.db.query(models.Project)
            .order_by(models.Project.updated_at.desc())
            .all()
        )
        if is_superuser(identity):
            return projects
        return [p for p in projects if can_access(p, identity)]

    def new_id(self) -> str:
        candidate = int(time.time() * 1000)
        while self.get(str(candidate)) is not None:
            candidate += 1
        return str(candidate)

    def save(self, document: schemas.ProjectDocument, identity: str) -> models.Project:
        project_id = document.project_id
        project = self.get(project_id) if project_id else None

        if project is None:
            project = models.Project(
                id=project_id or self.new_id(),
                owner=identity,
                version=0,
                created_at=datetime.utcnow(),
            )
            self.db.add(project)
        elif (
            document.expectedVersion is not None
            and document.expectedVersion != project.version
        ):
            raise VersionConflict(project.id, project.version)

        project.title = document.title
        project.data = document.blob()
        if document.isFavorite is not None:
            project.is_favorite = document.isFavorite
        if document.isArchived is not None:
            project.is_archived = document.isArchived

        project.version = (project.version or 0) + 1
        project.updated_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(project)
        logger.info("Saved project %s (version %s)", project.id, project.version)
        return project

    def update_flags(
        self, project: models.Project, flags: schemas.ProjectFlagsUpdate
    ) -> models.Project:
        if flags.isFavorite is not None:
            project.is_favorite = flags.isFavorite
        if flags.isArchived is not None:
            project.is_archived = flags.isArchived

        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project: models.Project) -> None:
        self.db.delete(project)
        self.db.commit()
        logger.info("Deleted project %s", project.id)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def to_document(project: models.Project) -> Dict[str, Any]:
    """Stored blob plus row metadata, JSON-ready for HTTP and the relay."""
    document = dict(project.data or {})
    document.update(
        id=project.id,
        title=project.title,
        owner=project.owner,
        isFavorite=bool(project.is_favorite),
        isArchived=bool(project.is_archived),
        version=project.version,
        createdAt=_iso(project.created_at),
        updatedAt=_iso(project.updated_at),
        savedAt=_iso(project.updated_at),
    )
    return document


def to_list_item(project: models.Project) -> schemas.ProjectListItem:
    return schemas.ProjectListItem(
        id=project.id,
        title=project.title,
        owner=project.owner,
        isFavorite=bool(project.is_favorite),
        isArchived=bool(project.is_archived),
        createdAt=project.created_at,
        updatedAt=project.updated_at,
    )
