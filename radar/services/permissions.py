"""
Permission checks for project management.
"""
import uuid
from typing import Iterable, Union

from sqlalchemy.orm import Session, joinedload

from ..models.models import User, Role, ProjectComment


MANAGER_ROLE_NAMES = frozenset({"coordenador", "coordenadora", "admin"})
MANAGER_MIN_LEVEL = 60


def has_management_role(roles: Iterable[Role]) -> bool:
    """True if any role is a coordinator/admin by name or has level >= 60."""
    for role in roles:
        name = (getattr(role, "name", None) or "").lower()
        level = getattr(role, "level", None) or 0
        if name in MANAGER_ROLE_NAMES or level >= MANAGER_MIN_LEVEL:
            return True
    return False


def can_manage_projects(db: Session, user_id: Union[str, uuid.UUID]) -> bool:
    user = (
        db.query(User)
        .options(joinedload(User.roles))
        .filter(User.id == uuid.UUID(str(user_id)))
        .first()
    )
    if not user:
        return False
    return has_management_role(user.roles)


def can_modify_comment(db: Session, user_id: Union[str, uuid.UUID], comment_id: Union[str, uuid.UUID]) -> bool:
    """
    Check if user can edit or remove a comment.
    - The comment's author
    - The creator of the comment's project
    - Anyone who can manage projects
    """
    comment = (
        db.query(ProjectComment)
        .options(joinedload(ProjectComment.project))
        .filter(ProjectComment.id == uuid.UUID(str(comment_id)))
        .first()
    )
    if not comment:
        return False
    uid = uuid.UUID(str(user_id))
    if comment.author_id == uid:
        return True
    if comment.project.created_by_id == uid:
        return True
    return can_manage_projects(db, uid)
