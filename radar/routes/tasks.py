from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import require_manager, visibility_scope
from ..db import get_db
from ..models.enums import Visibility
from ..models.models import User
from ..schemas.tasks import TaskCreate, TaskUpdate
from ..services.projects import ensure_project_visible
from ..services.tasks import (
    create_project_task,
    delete_project_task,
    get_project_tasks,
    update_project_task,
)


router = APIRouter(prefix="/api/projects/{project_id}/tasks", tags=["tasks"])


@router.get("")
def list_tasks(
    project_id: str,
    visibility: Optional[Visibility] = Depends(visibility_scope),
    db: Session = Depends(get_db),
):
    pid = ensure_project_visible(db, project_id, visibility)
    return {"tasks": get_project_tasks(db, pid)}


@router.post("", status_code=201)
def create_task(project_id: str, payload: TaskCreate, db: Session = Depends(get_db), _: User = Depends(require_manager)):
    pid = ensure_project_visible(db, project_id)
    return {"task": create_project_task(db, pid, payload)}


@router.put("/{task_id}")
def update_task(
    project_id: str, task_id: str, payload: TaskUpdate, db: Session = Depends(get_db), _: User = Depends(require_manager)
):
    return {"task": update_project_task(db, project_id, task_id, payload)}


@router.delete("/{task_id}")
def delete_task(project_id: str, task_id: str, db: Session = Depends(get_db), _: User = Depends(require_manager)):
    delete_project_task(db, project_id, task_id)
    return {"success": True}
