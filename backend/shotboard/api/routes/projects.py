from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from shotboard import models, schemas
from shotboard.api.dependencies import get_current_user, get_db, get_relay
from shotboard.realtime import Relay
from shotboard.services.access import can_access
from shotboard.services.projects import ProjectStore, VersionConflict, to_document, to_list_item
from shotboard.services.summary import build_report

router = APIRouter(tags=["projects"])


@router.get("/projects", response_model=List[schemas.ProjectListItem])
def list_projects(
    user: schemas.CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)
):
    return [to_list_item(p) for p in ProjectStore(db).list_for(user.email)]


@router.get("/project/{project_id}")
def get_project(
    project_id: str,
    user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id, user)
    return to_document(project)


@router.get("/project/{project_id}/summary", response_model=schemas.ProjectReport)
def get_project_summary(
    project_id: str,
    user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id, user)
    return build_report(project)


@router.post("/save-project", response_model=schemas.SaveResult)
async def save_project(
    document: schemas.ProjectDocument,
    user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    relay: Relay = Depends(get_relay),
):
    # store work runs off the event loop; only the fan-out is awaited here
    result, saved = await run_in_threadpool(_save_document, db, document, user)
    await relay.notify_project_saved(result.id, saved)
    return result


@router.patch("/project/{project_id}", response_model=schemas.ProjectListItem)
def update_project_flags(
    project_id: str,
    flags: schemas.ProjectFlagsUpdate,
    user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id, user)
    return to_list_item(ProjectStore(db).update_flags(project, flags))


@router.delete("/project/{project_id}", response_model=schemas.DeleteResult)
def delete_project(
    project_id: str,
    user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = _get_project_or_404(db, project_id, user)
    # peers in the room are not told; their next fetch returns 404
    ProjectStore(db).delete(project)
    return schemas.DeleteResult()


def _save_document(
    db: Session, document: schemas.ProjectDocument, user: schemas.CurrentUser
):
    store = ProjectStore(db)

    existing = store.get(document.project_id) if document.project_id else None
    if existing and not can_access(existing, user.email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No access to project")

    try:
        project = store.save(document, user.email)
    except VersionConflict as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Project was saved by someone else", "version": e.current_version},
        )

    result = schemas.SaveResult(
        id=project.id,
        projectId=project.id,
        version=project.version,
        updatedAt=project.updated_at,
    )
    return result, to_document(project)

def _get_project_or_404(
    db: Session, project_id: str, user: schemas.CurrentUser
) -> models.Project:
    project = ProjectStore(db).get(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if not can_access(project, user.email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No access to project")
    return project
