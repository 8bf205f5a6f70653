import uuid
from datetime import datetime, timedelta, timezone

import pytest

from radar.models.enums import CropPosition, FileCategory
from radar.models.models import (
    Project,
    ProjectComment,
    ProjectFile,
    ProjectTask,
    ProjectTimelineEntry,
    User,
)
from radar.services.mappers import (
    compute_progress,
    iso_datetime,
    map_comment,
    map_file,
    map_project,
    map_task,
    map_timeline_entry,
)


def _project(progress=40, statuses=()):
    project = Project(
        id=uuid.uuid4(),
        name="Ouvidoria Digital",
        description="Canal único de manifestações.",
        area="dialogo",
        status="em_andamento",
        priority="media",
        progress=progress,
        start_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        end_date=datetime(2025, 6, 30, tzinfo=timezone.utc),
        visibility="PUBLIC",
        featured=False,
    )
    for i, status in enumerate(statuses):
        project.tasks.append(ProjectTask(id=uuid.uuid4(), title=f"Tarefa {i}", status=status, order=i))
    return project


def test_progress_uses_stored_value_without_tasks():
    assert map_project(_project(progress=40))["progress"] == 40


@pytest.mark.parametrize(
    "statuses, expected",
    [
        (["concluida"], 100),
        (["nao_iniciada"], 0),
        (["concluida", "em_andamento", "nao_iniciada"], 33),
        (["concluida", "concluida", "em_andamento"], 67),
        (["concluida", "em_andamento"], 50),
        (["concluida"] + ["nao_iniciada"] * 7, 13),  # 12.5 rounds up
    ],
)
def test_progress_is_derived_from_tasks(statuses, expected):
    assert map_project(_project(progress=90, statuses=statuses))["progress"] == expected


def test_compute_progress_accepts_legacy_uppercase_status():
    assert compute_progress(0, ["CONCLUIDA", "EM_ANDAMENTO"]) == 50


@pytest.mark.parametrize("raw", [None, "", "planilha", "ANEXO", "desconhecido"])
def test_file_category_falls_back_to_anexo(raw):
    assert FileCategory.decode(raw) is FileCategory.ANEXO


@pytest.mark.parametrize("raw, expected", [("DESTAQUE", "destaque"), ("Comprovacao", "comprovacao"), ("background", "background")])
def test_file_category_is_case_insensitive(raw, expected):
    assert FileCategory.decode(raw).value == expected


@pytest.mark.parametrize("raw", [None, "", "middle", "LEFT"])
def test_crop_position_falls_back_to_center(raw):
    assert CropPosition.decode(raw) is CropPosition.CENTER


def test_map_file_normalizes_persisted_values():
    f = ProjectFile(id=uuid.uuid4(), name="capa.png", url="https://x/capa.png", mime_type="image/png",
                    category="BACKGROUND", position="Bottom")
    assert map_file(f) == {
        "id": str(f.id),
        "name": "capa.png",
        "url": "https://x/capa.png",
        "mimeType": "image/png",
        "category": "background",
        "position": "bottom",
    }

    legacy = ProjectFile(id=uuid.uuid4(), name="a.pdf", url="https://x/a.pdf", mime_type="application/pdf",
                         category=None, position="sideways")
    mapped = map_file(legacy)
    assert mapped["category"] == "anexo"
    assert mapped["position"] == "center"


def test_iso_datetime_format():
    aware = datetime(2025, 3, 1, 9, 30, 15, 123456, tzinfo=timezone(timedelta(hours=-3)))
    assert iso_datetime(aware) == "2025-03-01T12:30:15.123Z"
    assert iso_datetime(datetime(2025, 3, 1, 12, 0)) == "2025-03-01T12:00:00.000Z"
    assert iso_datetime(None) is None


def test_task_omits_absent_optional_fields():
    task = ProjectTask(id=uuid.uuid4(), title="Levantar requisitos", status="nao_iniciada", order=0,
                       created_at=datetime(2025, 1, 1), updated_at=datetime(2025, 1, 1))
    mapped = map_task(task)
    for key in ("description", "startDate", "dueDate", "completedAt", "responsible"):
        assert key not in mapped
    assert mapped["status"] == "nao_iniciada"
    assert mapped["createdAt"] == "2025-01-01T00:00:00.000Z"


def test_task_maps_responsible_person():
    user = User(id=uuid.uuid4(), name="Carla", email="carla@orgao.gov.br", avatar="https://x/c.png")
    task = ProjectTask(id=uuid.uuid4(), title="Publicar edital", status="CONCLUIDA", order=2,
                       completed_at=datetime(2025, 4, 2, 10, 0), responsible=user)
    mapped = map_task(task)
    assert mapped["status"] == "concluida"
    assert mapped["completedAt"] == "2025-04-02T10:00:00.000Z"
    assert mapped["responsible"] == {"id": str(user.id), "name": "Carla", "email": "carla@orgao.gov.br"}


def test_comment_attachments_must_be_a_list():
    author = User(id=uuid.uuid4(), name="Davi", email="davi@orgao.gov.br")
    comment = ProjectComment(id=uuid.uuid4(), content="Segue o relatório", author=author,
                             attachments=[{"name": "r.pdf", "url": "https://x/r.pdf", "mimeType": "application/pdf"}])
    assert map_comment(comment)["attachments"][0]["name"] == "r.pdf"

    comment.attachments = {"not": "a list"}
    assert "attachments" not in map_comment(comment)


def test_timeline_entry_type_fallback_and_task_link():
    task_id = uuid.uuid4()
    entry = ProjectTimelineEntry(id=uuid.uuid4(), label="Kickoff", type="FASE",
                                 start_date=datetime(2025, 1, 1), end_date=datetime(2025, 1, 31), task_id=task_id)
    mapped = map_timeline_entry(entry)
    assert mapped["type"] == "fase"
    assert mapped["taskId"] == str(task_id)
    assert "description" not in mapped

    entry.type = "evento"
    assert map_timeline_entry(entry)["type"] == "marco"


def test_project_visibility_and_optional_fields():
    mapped = map_project(_project())
    assert mapped["visibility"] == "public"
    assert mapped["featured"] is False
    for key in ("image", "imagePosition", "createdById"):
        assert key not in mapped
    assert mapped["startDate"] == "2025-01-01T00:00:00.000Z"
    assert mapped["team"] == [] and mapped["files"] == [] and mapped["tasks"] == []
