from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth.security import require_manager, visibility_scope
from ..db import get_db
from ..models.enums import Visibility
from ..models.models import User
from ..schemas.timeline import TimelineEntryCreate, TimelineEntryUpdate
from ..services.projects import ensure_project_visible
from ..services.timeline import (
    create_timeline_entry,
    delete_timeline_entry,
    get_timeline_entries,
    update_timeline_entry,
)


router = APIRouter(prefix="/api/projects/{project_id}/timeline", tags=["timeline"])


@router.get("")
def list_entries(
    project_id: str,
    visibility: Optional[Visibility] = Depends(visibility_scope),
    db: Session = Depends(get_db),
):
    pid = ensure_project_visible(db, project_id, visibility)
    return {"entries": get_timeline_entries(db, pid)}


@router.post("", status_code=201)
def create_entry(
    project_id: str, payload: TimelineEntryCreate, db: Session = Depends(get_db), _: User = Depends(require_manager)
):
    pid = ensure_project_visible(db, project_id)
    return {"entry": create_timeline_entry(db, pid, payload)}


@router.put("/{entry_id}")
def update_entry(
    project_id: str,
    entry_id: str,
    payload: TimelineEntryUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_manager),
):
    return {"entry": update_timeline_entry(db, project_id, entry_id, payload)}


@router.delete("/{entry_id}")
def delete_entry(project_id: str, entry_id: str, db: Session = Depends(get_db), _: User = Depends(require_manager)):
    delete_timeline_entry(db, project_id, entry_id)
    return {"success": True}
