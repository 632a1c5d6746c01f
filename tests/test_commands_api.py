from tests.conftest import API


def send(client, headers, **command):
    return client.post(f"{API}/commands", json=command, headers=headers)


def test_create_project_command(client, auth_headers):
    response = send(client, auth_headers, kind="create-project",
                    payload={"name": "Zeus", "description": "Thunder"})
    assert response.status_code == 200
    body = response.json()
    assert body["outcome"] == "committed"
    assert body["data"]["name"] == "Zeus"
    assert [p["name"] for p in body["projects"]] == ["Zeus"]


def test_invalid_command_payload(client, auth_headers):
    response = send(client, auth_headers, kind="create-project",
                    payload={"name": "Zeus", "description": ""})
    assert response.status_code == 422
    assert response.json() == {
        "outcome": "invalid",
        "message": "Project description is required",
        "data": None,
        "board": None,
        "projects": None,
    }


def test_unknown_command_kind(client, auth_headers):
    response = send(client, auth_headers, kind="launch-rocket")
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_status_change_and_delete_commands(client, auth_headers, project_id):
    created = send(client, auth_headers, kind="create-task",
                   payload={"title": "x", "status": "TO_DO", "project_id": project_id})
    assert created.status_code == 200
    task_id = created.json()["data"]["id"]

    changed = send(client, auth_headers, kind="status-change", task_id=task_id, new_status="IN_REVIEW")
    assert changed.status_code == 200
    board = {c["status"]: [t["id"] for t in c["tasks"]] for c in changed.json()["board"]}
    assert board["IN_REVIEW"] == [task_id]

    deleted = send(client, auth_headers, kind="delete-task", task_id=task_id)
    assert deleted.status_code == 200
    board = deleted.json()["board"]
    assert all(task_id not in [t["id"] for t in c["tasks"]] for c in board)


def test_failed_command_reports_underlying_message(client, auth_headers):
    response = send(client, auth_headers, kind="delete-project", project_id=12345)
    assert response.status_code == 400
    body = response.json()
    assert body["outcome"] == "failed"
    assert body["message"] == "Failed to delete project: Project with ID 12345 not found"


def test_update_commands(client, auth_headers, project_id):
    project = send(client, auth_headers, kind="update-project", project_id=project_id,
                   payload={"description": "New description"})
    assert project.status_code == 200
    assert project.json()["data"]["description"] == "New description"

    task = send(client, auth_headers, kind="create-task",
                payload={"title": "x", "status": "TO_DO", "project_id": project_id}).json()["data"]
    updated = send(client, auth_headers, kind="update-task", task_id=task["id"], payload={"points": 5})
    assert updated.status_code == 200
    assert updated.json()["data"]["points"] == 5


def test_commands_require_authentication(client):
    assert client.post(f"{API}/commands", json={"kind": "create-project", "payload": {}}).status_code == 401


def test_update_project_command_checks_existing_dates(client, auth_headers):
    created = client.post(f"{API}/projects", json={"name": "Undated", "description": "No dates yet"},
                          headers=auth_headers)
    assert created.status_code == 201
    project_id = created.json()["data"]["id"]

    response = send(client, auth_headers, kind="update-project", project_id=project_id,
                    payload={"start_date": "2024-01-01"})
    assert response.status_code == 422
    body = response.json()
    assert body["outcome"] == "invalid"
    assert body["message"] == "Both start date and end date are required"

    project = client.get(f"{API}/projects/{project_id}", headers=auth_headers).json()["data"]
    assert project["start_date"] is None
