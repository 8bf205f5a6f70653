from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth.security import require_manager, visibility_scope
from ..db import get_db
from ..errors import NotFoundError
from ..models.enums import Area, Visibility
from ..models.models import User
from ..schemas.projects import ProjectIn
from ..services import projects as repo


router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("")
def list_projects(
    id: Optional[str] = None,
    area: Optional[str] = None,
    visibility: Optional[Visibility] = Depends(visibility_scope),
    db: Session = Depends(get_db),
):
    if id:
        project = repo.get_project_by_id(db, id, visibility)
        if not project:
            raise NotFoundError(repo.PROJECT_NOT_FOUND)
        return {"project": project}

    if area and area != "all":
        try:
            area_value = Area(area)
        except ValueError:
            raise HTTPException(status_code=400, detail="Área inválida.")
        return {"projects": repo.get_projects_by_area(db, area_value, visibility)}
    return {"projects": repo.get_projects(db, visibility)}


@router.get("/metrics")
def project_metrics(
    visibility: Optional[Visibility] = Depends(visibility_scope),
    db: Session = Depends(get_db),
):
    return repo.get_project_metrics(db, visibility)


@router.post("", status_code=201)
def create_project(payload: ProjectIn, db: Session = Depends(get_db), user: User = Depends(require_manager)):
    return {"project": repo.create_project(db, payload, created_by_id=user.id)}


@router.put("/{project_id}")
def update_project(project_id: str, payload: ProjectIn, db: Session = Depends(get_db), _: User = Depends(require_manager)):
    return {"project": repo.update_project(db, project_id, payload)}


@router.delete("/{project_id}")
def delete_project(project_id: str, db: Session = Depends(get_db), _: User = Depends(require_manager)):
    repo.delete_project(db, project_id)
    return {"success": True}
