"""
Row -> API shape conversion.

Every read path goes through these functions so enum fallbacks, date
formatting and task-derived progress are applied the same way everywhere.
Optional values that are absent are left out of the result.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..models.enums import CropPosition, FileCategory, TaskStatus, TimelineType, Visibility
from ..models.models import (
    Project,
    ProjectComment,
    ProjectFile,
    ProjectTask,
    ProjectTimelineEntry,
    Role,
    TeamMember,
    User,
)


def iso_datetime(value: Optional[datetime]) -> Optional[str]:
    """UTC timestamp with millisecond precision, e.g. ``2025-03-01T12:00:00.000Z``."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def compute_progress(stored: int, task_statuses: Iterable[str]) -> int:
    statuses = list(task_statuses)
    if not statuses:
        return stored
    done = sum(1 for s in statuses if TaskStatus.decode(s) is TaskStatus.CONCLUIDA)
    total = len(statuses)
    # round-half-up of done / total * 100
    return (200 * done + total) // (2 * total)


def map_person(user: User) -> Dict[str, Any]:
    return {"id": str(user.id), "name": user.name, "email": user.email}


def map_role(role: Role) -> Dict[str, Any]:
    return _compact({
        "id": str(role.id),
        "name": role.name,
        "description": role.description,
        "level": role.level,
    })


def map_user(user: User) -> Dict[str, Any]:
    return _compact({
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "roles": [map_role(r) for r in user.roles],
    })


def map_team_member(member: TeamMember) -> Dict[str, Any]:
    return _compact({
        "id": str(member.id),
        "name": member.name,
        "role": member.role,
        "avatar": member.avatar,
    })


def map_file(file: ProjectFile) -> Dict[str, Any]:
    return {
        "id": str(file.id),
        "name": file.name,
        "url": file.url,
        "mimeType": file.mime_type,
        "category": FileCategory.decode(file.category).value,
        "position": CropPosition.decode(file.position).value,
    }


def map_task(task: ProjectTask) -> Dict[str, Any]:
    return _compact({
        "id": str(task.id),
        "title": task.title,
        "description": task.description,
        "status": TaskStatus.decode(task.status).value,
        "startDate": iso_datetime(task.start_date),
        "dueDate": iso_datetime(task.due_date),
        "completedAt": iso_datetime(task.completed_at),
        "responsible": map_person(task.responsible) if task.responsible else None,
        "order": task.order,
        "createdAt": iso_datetime(task.created_at),
        "updatedAt": iso_datetime(task.updated_at),
    })


def _map_attachments(raw: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(raw, list):
        return None
    return [a for a in raw if isinstance(a, dict)]


def map_comment(comment: ProjectComment) -> Dict[str, Any]:
    return _compact({
        "id": str(comment.id),
        "content": comment.content,
        "attachments": _map_attachments(comment.attachments),
        "author": map_person(comment.author),
        "createdAt": iso_datetime(comment.created_at),
        "updatedAt": iso_datetime(comment.updated_at),
    })


def map_timeline_entry(entry: ProjectTimelineEntry) -> Dict[str, Any]:
    return _compact({
        "id": str(entry.id),
        "label": entry.label,
        "description": entry.description,
        "type": TimelineType.decode(entry.type).value,
        "startDate": iso_datetime(entry.start_date),
        "endDate": iso_datetime(entry.end_date),
        "taskId": str(entry.task_id) if entry.task_id else None,
        "createdAt": iso_datetime(entry.created_at),
        "updatedAt": iso_datetime(entry.updated_at),
    })


def map_project(project: Project) -> Dict[str, Any]:
    tasks = [map_task(t) for t in project.tasks]
    return _compact({
        "id": str(project.id),
        "name": project.name,
        "description": project.description,
        "area": project.area,
        "status": project.status,
        "progress": compute_progress(project.progress, [t["status"] for t in tasks]),
        "startDate": iso_datetime(project.start_date),
        "endDate": iso_datetime(project.end_date),
        "priority": project.priority,
        "featured": project.featured,
        "image": project.image,
        "imagePosition": CropPosition.decode(project.image_position).value if project.image_position else None,
        "visibility": Visibility.decode(project.visibility).value,
        "createdById": str(project.created_by_id) if project.created_by_id else None,
        "team": [map_team_member(m) for m in project.team],
        "files": [map_file(f) for f in project.files],
        "tasks": tasks,
        "comments": [map_comment(c) for c in project.comments],
        "timeline": [map_timeline_entry(e) for e in project.timeline],
    })
