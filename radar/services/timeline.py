import uuid
from typing import Any, Dict, List, Union

import structlog
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..models.models import ProjectTimelineEntry
from ..schemas.timeline import TimelineEntryCreate, TimelineEntryUpdate
from .mappers import map_timeline_entry
from .projects import parse_id


logger = structlog.get_logger(__name__)

ENTRY_NOT_FOUND = "Evento da timeline não encontrado."


def _get_entry(db: Session, project_id: uuid.UUID, entry_id: Union[str, uuid.UUID]) -> ProjectTimelineEntry:
    eid = parse_id(entry_id, ENTRY_NOT_FOUND)
    entry = (
        db.query(ProjectTimelineEntry)
        .filter(ProjectTimelineEntry.id == eid, ProjectTimelineEntry.project_id == project_id)
        .first()
    )
    if entry is None:
        raise NotFoundError(ENTRY_NOT_FOUND)
    return entry


def get_timeline_entries(db: Session, project_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
    pid = parse_id(project_id)
    entries = (
        db.query(ProjectTimelineEntry)
        .filter(ProjectTimelineEntry.project_id == pid)
        .order_by(ProjectTimelineEntry.start_date.asc())
        .all()
    )
    return [map_timeline_entry(e) for e in entries]


def create_timeline_entry(db: Session, project_id: Union[str, uuid.UUID], data: TimelineEntryCreate) -> Dict[str, Any]:
    pid = parse_id(project_id)
    entry = ProjectTimelineEntry(
        project_id=pid,
        label=data.label,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        type=data.type.value,
        task_id=data.task_id,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("timeline_entry_created", project_id=str(pid), entry_id=str(entry.id))
    return map_timeline_entry(entry)


def update_timeline_entry(
    db: Session, project_id: Union[str, uuid.UUID], entry_id: Union[str, uuid.UUID], data: TimelineEntryUpdate
) -> Dict[str, Any]:
    pid = parse_id(project_id)
    entry = _get_entry(db, pid, entry_id)
    sent = data.model_fields_set

    if data.label is not None:
        entry.label = data.label
    if "description" in sent:
        entry.description = data.description
    if data.start_date is not None:
        entry.start_date = data.start_date
    if data.end_date is not None:
        entry.end_date = data.end_date
    if data.type is not None:
        entry.type = data.type.value
    if "task_id" in sent:
        entry.task_id = data.task_id

    db.commit()
    db.refresh(entry)
    logger.info("timeline_entry_updated", project_id=str(pid), entry_id=str(entry.id))
    return map_timeline_entry(entry)


def delete_timeline_entry(db: Session, project_id: Union[str, uuid.UUID], entry_id: Union[str, uuid.UUID]) -> None:
    pid = parse_id(project_id)
    entry = _get_entry(db, pid, entry_id)
    db.delete(entry)
    db.commit()
    logger.info("timeline_entry_deleted", project_id=str(pid), entry_id=str(entry_id))
