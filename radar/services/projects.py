"""
Project persistence: visibility-filtered reads, create/update/delete and
aggregate counts.
"""
import uuid
from typing import Any, Dict, List, Optional, Union

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..errors import NotFoundError
from ..models.enums import Area, Visibility
from ..models.models import (
    Project,
    ProjectAccessRule,
    ProjectComment,
    ProjectFile,
    ProjectTask,
)
from ..schemas.projects import ProjectIn, ProjectFileIn
from .mappers import map_project


logger = structlog.get_logger(__name__)

PROJECT_NOT_FOUND = "Projeto não encontrado."

# Eager-load everything map_project touches
PROJECT_WITH_RELATIONS = (
    selectinload(Project.team),
    selectinload(Project.files),
    selectinload(Project.tasks).selectinload(ProjectTask.responsible),
    selectinload(Project.comments).selectinload(ProjectComment.author),
    selectinload(Project.timeline),
)


def parse_id(value: Union[str, uuid.UUID], message: str = PROJECT_NOT_FOUND) -> uuid.UUID:
    """Malformed ids cannot match any row, so they are reported as not found."""
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        raise NotFoundError(message)


def _project_query(db: Session, visibility: Optional[Visibility] = None):
    query = db.query(Project).options(*PROJECT_WITH_RELATIONS)
    if visibility:
        query = query.filter(Project.visibility == Visibility(visibility).value)
    return query


def _load_project(db: Session, project_id: uuid.UUID) -> Optional[Project]:
    return _project_query(db).filter(Project.id == project_id).populate_existing().first()


def get_projects(db: Session, visibility: Optional[Visibility] = None) -> List[Dict[str, Any]]:
    projects = _project_query(db, visibility).order_by(Project.created_at.desc()).all()
    return [map_project(p) for p in projects]


def get_project_by_id(
    db: Session, project_id: Union[str, uuid.UUID], visibility: Optional[Visibility] = None
) -> Optional[Dict[str, Any]]:
    try:
        pid = uuid.UUID(str(project_id))
    except (ValueError, TypeError):
        return None
    project = _project_query(db, visibility).filter(Project.id == pid).first()
    return map_project(project) if project else None


def get_projects_by_area(db: Session, area: Area, visibility: Optional[Visibility] = None) -> List[Dict[str, Any]]:
    projects = (
        _project_query(db, visibility)
        .filter(Project.area == Area(area).value)
        .order_by(Project.created_at.desc())
        .all()
    )
    return [map_project(p) for p in projects]


def ensure_project_visible(
    db: Session, project_id: Union[str, uuid.UUID], visibility: Optional[Visibility] = None
) -> uuid.UUID:
    """Return the parsed id if the project exists under the given visibility filter."""
    pid = parse_id(project_id)
    query = db.query(Project.id).filter(Project.id == pid)
    if visibility:
        query = query.filter(Project.visibility == Visibility(visibility).value)
    if query.first() is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    return pid


def _new_file(project_id: uuid.UUID, data: ProjectFileIn) -> ProjectFile:
    return ProjectFile(
        project_id=project_id,
        name=data.name,
        url=data.url,
        mime_type=data.mime_type,
        category=data.category_value,
        position=data.position_value,
    )


def _apply_attributes(project: Project, data: ProjectIn) -> None:
    project.name = data.name
    project.description = data.description
    project.area = data.area.value
    project.status = data.status.value
    project.priority = data.priority.value
    project.start_date = data.start_date
    project.end_date = data.end_date
    project.visibility = data.visibility.value
    project.featured = bool(data.featured)
    project.image = data.image_url
    project.image_position = data.image_position.value if data.image_position else None


def create_project(db: Session, data: ProjectIn, created_by_id: Union[str, uuid.UUID]) -> Dict[str, Any]:
    creator = uuid.UUID(str(created_by_id))
    project = Project(id=uuid.uuid4(), progress=0, created_by_id=creator)
    _apply_attributes(project, data)
    db.add(project)
    db.flush()
    # Creator always gets full rights on the new project
    db.add(ProjectAccessRule(project_id=project.id, user_id=creator, can_view=True, can_edit=True, can_manage=True))
    for f in data.files or []:
        db.add(_new_file(project.id, f))
    db.commit()
    logger.info("project_created", project_id=str(project.id), created_by=str(creator))
    return map_project(_load_project(db, project.id))


def reconcile_files(db: Session, project_id: uuid.UUID, files: List[ProjectFileIn]) -> None:
    """
    Make the project's files match ``files``:
    - stored files whose id is not submitted are deleted
    - submitted files without id are inserted
    - submitted files with a known id are updated in place
    Does not commit.
    """
    existing = {f.id: f for f in db.query(ProjectFile).filter(ProjectFile.project_id == project_id).all()}
    keep_ids = {f.id for f in files if f.id}
    unknown = keep_ids - set(existing)
    if unknown:
        raise NotFoundError("Arquivo não encontrado.")

    for file_id, stored in existing.items():
        if file_id not in keep_ids:
            db.delete(stored)

    for f in files:
        if f.id is None:
            db.add(_new_file(project_id, f))
            continue
        stored = existing[f.id]
        stored.name = f.name
        stored.url = f.url
        stored.mime_type = f.mime_type
        stored.category = f.category_value
        stored.position = f.position_value


def update_project(db: Session, project_id: Union[str, uuid.UUID], data: ProjectIn) -> Dict[str, Any]:
    """Overwrite every attribute; when ``data.files`` is given reconcile files too.

    Attributes and files are written in a single transaction.
    """
    pid = parse_id(project_id)
    project = db.get(Project, pid)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    try:
        _apply_attributes(project, data)
        if data.files is not None:
            reconcile_files(db, pid, data.files)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("project_updated", project_id=str(pid))
    project = _load_project(db, pid)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    return map_project(project)


def delete_project(db: Session, project_id: Union[str, uuid.UUID]) -> None:
    pid = parse_id(project_id)
    project = db.get(Project, pid)
    if project is None:
        raise NotFoundError(PROJECT_NOT_FOUND)
    db.delete(project)
    db.commit()
    logger.info("project_deleted", project_id=str(pid))


def _count_query(db: Session, *columns, visibility: Optional[Visibility] = None):
    query = db.query(*columns)
    if visibility:
        query = query.filter(Project.visibility == Visibility(visibility).value)
    return query


def get_projects_count_by_area(db: Session, visibility: Optional[Visibility] = None) -> Dict[str, int]:
    rows = _count_query(db, Project.area, func.count(Project.id), visibility=visibility).group_by(Project.area).all()
    return {area: count for area, count in rows}


def get_projects_count_by_status(db: Session, visibility: Optional[Visibility] = None) -> Dict[str, int]:
    rows = (
        _count_query(db, Project.status, func.count(Project.id), visibility=visibility)
        .group_by(Project.status)
        .all()
    )
    return {status: count for status, count in rows}


def get_projects_total(db: Session, visibility: Optional[Visibility] = None) -> int:
    return _count_query(db, func.count(Project.id), visibility=visibility).scalar() or 0


def get_project_metrics(db: Session, visibility: Optional[Visibility] = None) -> Dict[str, Any]:
    by_area = get_projects_count_by_area(db, visibility)
    return {
        "countsByArea": by_area,
        "countsByStatus": get_projects_count_by_status(db, visibility),
        "totalProjects": get_projects_total(db, visibility),
        "activeAreas": len(by_area),
    }
