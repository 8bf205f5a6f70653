import uuid

from conftest import auth_headers, make_project, make_user


def _tasks_url(project):
    return f"/api/projects/{project.id}/tasks"


def test_create_task_with_unknown_responsible(client, db, manager):
    project = make_project(db)
    response = client.post(
        _tasks_url(project),
        json={"title": "Tarefa X", "responsibleEmail": "ninguem@orgao.gov.br"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 201
    task = response.json()["task"]
    assert task["title"] == "Tarefa X"
    assert task["status"] == "nao_iniciada"
    assert task["order"] == 0
    assert "responsible" not in task
    assert "completedAt" not in task


def test_responsible_is_matched_case_insensitively(client, db, manager):
    carla = make_user(db, "carla@orgao.gov.br", name="Carla")
    project = make_project(db)
    response = client.post(
        _tasks_url(project),
        json={"title": "Publicar edital", "responsibleEmail": "Carla@Orgao.gov.br"},
        headers=auth_headers(manager),
    )
    assert response.json()["task"]["responsible"] == {"id": str(carla.id), "name": "Carla", "email": "carla@orgao.gov.br"}


def test_order_is_append_only(client, db, manager):
    project = make_project(db)
    for title in ("Primeira", "Segunda", "Terceira"):
        client.post(_tasks_url(project), json={"title": title}, headers=auth_headers(manager))

    tasks = client.get(_tasks_url(project)).json()["tasks"]
    assert [(t["title"], t["order"]) for t in tasks] == [("Primeira", 0), ("Segunda", 1), ("Terceira", 2)]


def test_status_change_sets_and_clears_completed_at(client, db, manager):
    project = make_project(db)
    task = client.post(_tasks_url(project), json={"title": "Revisar"}, headers=auth_headers(manager)).json()["task"]
    url = f"{_tasks_url(project)}/{task['id']}"

    done = client.put(url, json={"status": "concluida"}, headers=auth_headers(manager)).json()["task"]
    assert done["status"] == "concluida"
    assert done["completedAt"].endswith("Z")
    assert done["title"] == "Revisar"

    reopened = client.put(url, json={"status": "em_andamento"}, headers=auth_headers(manager)).json()["task"]
    assert reopened["status"] == "em_andamento"
    assert "completedAt" not in reopened


def test_create_completed_task(client, db, manager):
    project = make_project(db)
    task = client.post(
        _tasks_url(project), json={"title": "Entregue", "status": "concluida"}, headers=auth_headers(manager)
    ).json()["task"]
    assert "completedAt" in task


def test_blank_responsible_clears_assignment(client, db, manager):
    make_user(db, "carla@orgao.gov.br", name="Carla")
    project = make_project(db)
    task = client.post(
        _tasks_url(project), json={"title": "Revisar", "responsibleEmail": "carla@orgao.gov.br"},
        headers=auth_headers(manager),
    ).json()["task"]
    assert "responsible" in task

    url = f"{_tasks_url(project)}/{task['id']}"
    untouched = client.put(url, json={"title": "Revisar texto"}, headers=auth_headers(manager)).json()["task"]
    assert untouched["responsible"]["email"] == "carla@orgao.gov.br"

    cleared = client.put(url, json={"responsibleEmail": ""}, headers=auth_headers(manager)).json()["task"]
    assert "responsible" not in cleared


def test_progress_is_derived_from_tasks(client, db, manager):
    project = make_project(db, progress=80)
    headers = auth_headers(manager)
    client.post(_tasks_url(project), json={"title": "Feita", "status": "concluida"}, headers=headers)
    client.post(_tasks_url(project), json={"title": "Pendente"}, headers=headers)
    client.post(_tasks_url(project), json={"title": "Outra pendente"}, headers=headers)

    body = client.get(f"/api/projects?id={project.id}").json()["project"]
    assert body["progress"] == 33
    assert [t["title"] for t in body["tasks"]] == ["Feita", "Pendente", "Outra pendente"]


def test_task_from_another_project_is_not_found(client, db, manager):
    first = make_project(db, name="Primeiro")
    second = make_project(db, name="Segundo")
    task = client.post(_tasks_url(first), json={"title": "Tarefa"}, headers=auth_headers(manager)).json()["task"]

    response = client.put(f"{_tasks_url(second)}/{task['id']}", json={"status": "concluida"}, headers=auth_headers(manager))
    assert response.status_code == 404
    assert response.json() == {"error": "Tarefa não encontrada."}


def test_create_task_on_missing_project(client, manager):
    response = client.post(f"/api/projects/{uuid.uuid4()}/tasks", json={"title": "Tarefa"}, headers=auth_headers(manager))
    assert response.status_code == 404


def test_restricted_project_tasks_hidden_from_anonymous(client, db, member):
    project = make_project(db, visibility="restricted")
    assert client.get(_tasks_url(project)).status_code == 404
    assert client.get(_tasks_url(project), headers=auth_headers(member)).json() == {"tasks": []}


def test_member_cannot_change_tasks(client, db, member):
    project = make_project(db)
    response = client.post(_tasks_url(project), json={"title": "Tarefa"}, headers=auth_headers(member))
    assert response.status_code == 403


def test_title_validation(client, db, manager):
    project = make_project(db)
    response = client.post(_tasks_url(project), json={"title": "ab"}, headers=auth_headers(manager))
    assert response.status_code == 422
    assert response.json()["error"]["fieldErrors"]["title"] == ["Informe um titulo com pelo menos 3 caracteres."]


def test_delete_task(client, db, manager):
    project = make_project(db)
    task = client.post(_tasks_url(project), json={"title": "Tarefa"}, headers=auth_headers(manager)).json()["task"]
    url = f"{_tasks_url(project)}/{task['id']}"

    assert client.delete(url, headers=auth_headers(manager)).json() == {"success": True}
    assert client.get(_tasks_url(project)).json() == {"tasks": []}
    assert client.delete(url, headers=auth_headers(manager)).status_code == 404
