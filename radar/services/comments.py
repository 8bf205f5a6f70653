import uuid
from typing import Any, Dict, List, Union

import structlog
from sqlalchemy.orm import Session, joinedload

from ..errors import NotFoundError
from ..models.models import ProjectComment
from ..schemas.comments import CommentIn
from .mappers import map_comment
from .projects import parse_id


logger = structlog.get_logger(__name__)

COMMENT_NOT_FOUND = "Comentário não encontrado."


def get_comment(db: Session, project_id: Union[str, uuid.UUID], comment_id: Union[str, uuid.UUID]) -> ProjectComment:
    pid = parse_id(project_id)
    cid = parse_id(comment_id, COMMENT_NOT_FOUND)
    comment = (
        db.query(ProjectComment)
        .options(joinedload(ProjectComment.author))
        .filter(ProjectComment.id == cid, ProjectComment.project_id == pid)
        .first()
    )
    if comment is None:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return comment


def get_project_comments(db: Session, project_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
    pid = parse_id(project_id)
    comments = (
        db.query(ProjectComment)
        .options(joinedload(ProjectComment.author))
        .filter(ProjectComment.project_id == pid)
        .order_by(ProjectComment.created_at.desc())
        .all()
    )
    return [map_comment(c) for c in comments]


def create_project_comment(
    db: Session, project_id: Union[str, uuid.UUID], author_id: Union[str, uuid.UUID], data: CommentIn
) -> Dict[str, Any]:
    pid = parse_id(project_id)
    comment = ProjectComment(
        project_id=pid,
        author_id=uuid.UUID(str(author_id)),
        content=data.content,
        attachments=data.attachments_json() or [],
    )
    db.add(comment)
    db.commit()
    logger.info("comment_created", project_id=str(pid), comment_id=str(comment.id))
    return map_comment(get_comment(db, pid, comment.id))


def update_project_comment(
    db: Session, project_id: Union[str, uuid.UUID], comment_id: Union[str, uuid.UUID], data: CommentIn
) -> Dict[str, Any]:
    comment = get_comment(db, project_id, comment_id)
    comment.content = data.content
    # Attachments are only replaced when the body carries them
    if data.attachments is not None:
        comment.attachments = data.attachments_json()
    db.commit()
    logger.info("comment_updated", comment_id=str(comment.id))
    return map_comment(get_comment(db, project_id, comment.id))


def delete_project_comment(db: Session, project_id: Union[str, uuid.UUID], comment_id: Union[str, uuid.UUID]) -> None:
    comment = get_comment(db, project_id, comment_id)
    db.delete(comment)
    db.commit()
    logger.info("comment_deleted", comment_id=str(comment_id))
