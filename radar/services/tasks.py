import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..errors import NotFoundError
from ..models.enums import TaskStatus
from ..models.models import ProjectTask, User
from ..schemas.tasks import TaskCreate, TaskUpdate
from .mappers import map_task
from .projects import parse_id


logger = structlog.get_logger(__name__)

TASK_NOT_FOUND = "Tarefa não encontrada."


def find_user_id_by_email(db: Session, email: Optional[str]) -> Optional[uuid.UUID]:
    """Best-effort lookup; ``None`` for blank or unknown e-mails."""
    if not email:
        return None
    normalized = email.strip().lower()
    if not normalized:
        return None
    user = db.query(User).filter(User.email == normalized).first()
    return user.id if user else None


def _completed_at_for(status: TaskStatus) -> Optional[datetime]:
    return datetime.now(timezone.utc) if status is TaskStatus.CONCLUIDA else None


def _get_task(db: Session, project_id: uuid.UUID, task_id: Union[str, uuid.UUID]) -> ProjectTask:
    tid = parse_id(task_id, TASK_NOT_FOUND)
    task = (
        db.query(ProjectTask)
        .filter(ProjectTask.id == tid, ProjectTask.project_id == project_id)
        .first()
    )
    if task is None:
        raise NotFoundError(TASK_NOT_FOUND)
    return task


def _reload(db: Session, task_id: uuid.UUID) -> ProjectTask:
    return (
        db.query(ProjectTask)
        .options(joinedload(ProjectTask.responsible))
        .filter(ProjectTask.id == task_id)
        .one()
    )


def get_project_tasks(db: Session, project_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
    pid = parse_id(project_id)
    tasks = (
        db.query(ProjectTask)
        .options(joinedload(ProjectTask.responsible))
        .filter(ProjectTask.project_id == pid)
        .order_by(ProjectTask.order.asc(), ProjectTask.created_at.asc())
        .all()
    )
    return [map_task(t) for t in tasks]


def create_project_task(db: Session, project_id: Union[str, uuid.UUID], data: TaskCreate) -> Dict[str, Any]:
    pid = parse_id(project_id)
    # Append-only ordering
    order = db.query(func.count(ProjectTask.id)).filter(ProjectTask.project_id == pid).scalar() or 0
    status = data.status or TaskStatus.NAO_INICIADA
    task = ProjectTask(
        project_id=pid,
        title=data.title.strip(),
        description=data.description,
        status=status.value,
        responsible_id=find_user_id_by_email(db, data.responsible_email),
        start_date=data.start_date,
        due_date=data.due_date,
        completed_at=_completed_at_for(status),
        order=order,
    )
    db.add(task)
    db.commit()
    logger.info("task_created", project_id=str(pid), task_id=str(task.id))
    return map_task(_reload(db, task.id))


def update_project_task(
    db: Session, project_id: Union[str, uuid.UUID], task_id: Union[str, uuid.UUID], data: TaskUpdate
) -> Dict[str, Any]:
    pid = parse_id(project_id)
    task = _get_task(db, pid, task_id)
    sent = data.model_fields_set

    if "title" in sent and data.title is not None:
        task.title = data.title.strip()
    if "description" in sent:
        task.description = data.description
    if "start_date" in sent:
        task.start_date = data.start_date
    if "due_date" in sent:
        task.due_date = data.due_date
    if data.status is not None:
        task.status = data.status.value
        task.completed_at = _completed_at_for(data.status)
    if "responsible_email" in sent:
        task.responsible_id = find_user_id_by_email(db, data.responsible_email)

    db.commit()
    logger.info("task_updated", project_id=str(pid), task_id=str(task.id))
    return map_task(_reload(db, task.id))


def delete_project_task(db: Session, project_id: Union[str, uuid.UUID], task_id: Union[str, uuid.UUID]) -> None:
    pid = parse_id(project_id)
    task = _get_task(db, pid, task_id)
    db.delete(task)
    db.commit()
    logger.info("task_deleted", project_id=str(pid), task_id=str(task_id))
