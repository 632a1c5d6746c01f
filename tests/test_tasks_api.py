from tests.conftest import API


def test_create_task_defaults(client, auth_headers, project_id):
    response = client.post(
        f"{API}/tasks",
        json={"title": "  Write docs ", "status": "TO_DO", "project_id": project_id},
        headers=auth_headers,
    )
    assert response.status_code == 201
    task = response.json()["data"]
    assert task["title"] == "Write docs"
    assert task["priority"] == "MEDIUM"
    assert task["assigned_users"] == []


def test_create_task_validation_messages(client, auth_headers, project_id):
    cases = [
        ({"title": "", "status": "TO_DO"}, "Task title is required!"),
        ({"title": "x"}, "Please select a task status."),
        ({"title": "x", "status": "TO_DO", "start_date": "2024-02-02", "due_date": "2024-02-01"},
         "Due date must be after start date."),
    ]
    for payload, message in cases:
        response = client.post(f"{API}/tasks", json={**payload, "project_id": project_id}, headers=auth_headers)
        assert response.status_code == 422
        errors = response.json()["details"]["field_errors"]
        assert any(message in text for text in errors.values())

    assert client.get(f"{API}/tasks/project/{project_id}", headers=auth_headers).json()["data"] == []


def test_create_task_for_missing_project(client, auth_headers):
    response = client.post(
        f"{API}/tasks", json={"title": "x", "status": "TO_DO", "project_id": 404}, headers=auth_headers
    )
    assert response.status_code == 404
    assert response.json()["error_code"] == "PROJECT_NOT_FOUND"


def test_assignees_and_update(client, auth_headers, project_id):
    me = client.get(f"{API}/auth/session", headers=auth_headers).json()["data"]
    task = client.post(
        f"{API}/tasks",
        json={"title": "x", "status": "TO_DO", "project_id": project_id, "assigned_user_ids": [me["id"]],
              "tags": "backend", "points": 3, "start_date": "2024-01-01", "due_date": "2024-01-10"},
        headers=auth_headers,
    ).json()["data"]
    assert task["assigned_users"] == [{"id": me["id"], "name": "Alice"}]

    response = client.put(
        f"{API}/tasks/{task['id']}",
        json={"title": "y", "priority": "URGENT", "assigned_user_ids": []},
        headers=auth_headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["title"] == "y"
    assert updated["priority"] == "URGENT"
    assert updated["tags"] == "backend"
    assert updated["assigned_users"] == []

    bad = client.put(f"{API}/tasks/{task['id']}", json={"due_date": "2023-12-31"}, headers=auth_headers)
    assert bad.status_code == 422

    unknown_user = client.put(
        f"{API}/tasks/{task['id']}", json={"assigned_user_ids": ["nobody"]}, headers=auth_headers
    )
    assert unknown_user.status_code == 404
    assert unknown_user.json()["error_code"] == "USER_NOT_FOUND"


def test_any_status_transition_is_allowed(client, auth_headers, project_id):
    task = client.post(
        f"{API}/tasks", json={"title": "x", "status": "COMPLETED", "project_id": project_id}, headers=auth_headers
    ).json()["data"]

    for status in ["TO_DO", "IN_REVIEW", "IN_PROGRESS", "COMPLETED", "TO_DO"]:
        response = client.put(f"{API}/tasks/{task['id']}/status", json={"status": status}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == status

    invalid = client.put(f"{API}/tasks/{task['id']}/status", json={"status": "DONE"}, headers=auth_headers)
    assert invalid.status_code == 422


def test_delete_task(client, auth_headers, project_id):
    task = client.post(
        f"{API}/tasks", json={"title": "x", "status": "TO_DO", "project_id": project_id}, headers=auth_headers
    ).json()["data"]

    assert client.delete(f"{API}/tasks/{task['id']}", headers=auth_headers).status_code == 200
    missing = client.delete(f"{API}/tasks/{task['id']}", headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "TASK_NOT_FOUND"


def test_list_tasks_for_missing_project(client, auth_headers):
    assert client.get(f"{API}/tasks/project/999", headers=auth_headers).status_code == 404
