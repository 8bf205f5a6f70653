import uuid

import pytest

from radar.models.models import ProjectComment, Role
from radar.services.permissions import can_manage_projects, can_modify_comment, has_management_role

from conftest import make_project, make_user


@pytest.mark.parametrize(
    "name, level, expected",
    [
        ("analista", 60, True),
        ("analista", 59, False),
        ("Coordenador", 0, True),
        ("COORDENADORA", 0, True),
        ("Admin", 0, True),
        ("membro", 10, False),
    ],
)
def test_has_management_role(name, level, expected):
    assert has_management_role([Role(name=name, level=level)]) is expected


def test_has_management_role_any_role_suffices():
    roles = [Role(name="membro", level=10), Role(name="gestor", level=75)]
    assert has_management_role(roles) is True
    assert has_management_role([]) is False


def test_can_manage_projects_level_threshold(db):
    at_threshold = make_user(db, "sessenta@orgao.gov.br", role="gestor", level=60)
    below = make_user(db, "cinquenta@orgao.gov.br", role="assessor", level=59)
    assert can_manage_projects(db, at_threshold.id) is True
    assert can_manage_projects(db, below.id) is False


def test_can_manage_projects_unknown_user(db):
    assert can_manage_projects(db, uuid.uuid4()) is False


def test_can_modify_comment(db, manager):
    creator = make_user(db, "criador@orgao.gov.br", role="membro", level=10)
    author = make_user(db, "autor@orgao.gov.br")
    outsider = make_user(db, "outro@orgao.gov.br")
    project = make_project(db, created_by=creator)
    comment = ProjectComment(project_id=project.id, author_id=author.id, content="Comentário")
    db.add(comment)
    db.commit()

    assert can_modify_comment(db, author.id, comment.id) is True
    assert can_modify_comment(db, creator.id, comment.id) is True
    assert can_modify_comment(db, manager.id, comment.id) is True
    assert can_modify_comment(db, outsider.id, comment.id) is False
    assert can_modify_comment(db, author.id, uuid.uuid4()) is False
