from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..auth.security import FORBIDDEN, get_current_user, require_manager, visibility_scope
from ..db import get_db
from ..models.enums import Visibility
from ..models.models import User
from ..schemas.comments import CommentIn
from ..services.comments import (
    create_project_comment,
    delete_project_comment,
    get_comment,
    get_project_comments,
    update_project_comment,
)
from ..services.permissions import can_modify_comment
from ..services.projects import ensure_project_visible


router = APIRouter(prefix="/api/projects/{project_id}/comments", tags=["comments"])


def _authorize_comment_change(db: Session, user: User, project_id: str, comment_id: str) -> None:
    # 404 for unknown comments, 403 when the caller is not author/creator/manager
    comment = get_comment(db, project_id, comment_id)
    if not can_modify_comment(db, user.id, comment.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN)


@router.get("")
def list_comments(
    project_id: str,
    visibility: Optional[Visibility] = Depends(visibility_scope),
    db: Session = Depends(get_db),
):
    pid = ensure_project_visible(db, project_id, visibility)
    return {"comments": get_project_comments(db, pid)}


@router.post("", status_code=201)
def create_comment(project_id: str, payload: CommentIn, db: Session = Depends(get_db), user: User = Depends(require_manager)):
    pid = ensure_project_visible(db, project_id)
    return {"comment": create_project_comment(db, pid, user.id, payload)}


@router.put("/{comment_id}")
def update_comment(
    project_id: str, comment_id: str, payload: CommentIn, db: Session = Depends(get_db), user: User = Depends(get_current_user)
):
    _authorize_comment_change(db, user, project_id, comment_id)
    return {"comment": update_project_comment(db, project_id, comment_id, payload)}


@router.delete("/{comment_id}")
def delete_comment(project_id: str, comment_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    _authorize_comment_change(db, user, project_id, comment_id)
    delete_project_comment(db, project_id, comment_id)
    return {"success": True}
