from tests.conftest import API


def create_project(client, headers, **overrides):
    payload = {"name": "Project", "description": "Something", **overrides}
    return client.post(f"{API}/projects", json=payload, headers=headers)


def create_task(client, headers, project_id, status="TO_DO", **overrides):
    payload = {"title": "Task", "status": status, "project_id": project_id, **overrides}
    response = client.post(f"{API}/tasks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_and_get_project(client, auth_headers, project_id):
    response = client.get(f"{API}/projects/{project_id}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Apollo"
    assert data["start_date"] == "2024-01-01"
    assert data["status"] == "No Tasks"
    assert data["task_count"] == 0
    assert data["tasks"] == []


def test_project_validation(client, auth_headers):
    cases = [
        ({"name": " "}, "name"),
        ({"description": ""}, "description"),
        ({"start_date": "2024-01-01"}, "both"),
        ({"start_date": "2024-02-01", "end_date": "2024-01-01"}, "order"),
    ]
    for overrides, _ in cases:
        response = create_project(client, auth_headers, **overrides)
        assert response.status_code == 422

    listing = client.get(f"{API}/projects", headers=auth_headers).json()["data"]
    assert listing == []


def test_missing_project_is_404(client, auth_headers):
    response = client.get(f"{API}/projects/999", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "PROJECT_NOT_FOUND"


def test_update_project_checks_merged_dates(client, auth_headers, project_id):
    response = client.put(f"{API}/projects/{project_id}", json={"name": "Apollo 11"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Apollo 11"
    assert response.json()["data"]["description"] == "Moon shot"

    # 只改开始日期且晚于已有的结束日期
    bad = client.put(f"{API}/projects/{project_id}", json={"start_date": "2024-06-01"}, headers=auth_headers)
    assert bad.status_code == 422
    assert bad.json()["message"] == "End date must be after start date."


def test_delete_project_cascades_tasks(client, auth_headers, project_id):
    task = create_task(client, auth_headers, project_id)

    response = client.delete(f"{API}/projects/{project_id}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"{API}/projects/{project_id}", headers=auth_headers).status_code == 404
    assert client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).status_code == 404


def test_list_projects_filters_and_sorts(client, auth_headers):
    done = create_project(client, auth_headers, name="Done", start_date="2024-01-01", end_date="2024-04-01").json()["data"]
    empty = create_project(client, auth_headers, name="Empty").json()["data"]
    busy = create_project(client, auth_headers, name="Busy", start_date="2024-01-01", end_date="2024-02-01").json()["data"]

    create_task(client, auth_headers, done["id"], status="COMPLETED")
    create_task(client, auth_headers, done["id"], status="COMPLETED")
    create_task(client, auth_headers, busy["id"], status="IN_PROGRESS")

    def names(**params):
        response = client.get(f"{API}/projects", params=params, headers=auth_headers)
        assert response.status_code == 200
        return [p["name"] for p in response.json()["data"]]

    assert names() == ["Done", "Empty", "Busy"]
    assert names(status="Completed") == ["Done"]
    assert names(status="No Tasks") == ["Empty"]
    assert names(task_count_order="desc") == ["Done", "Busy", "Empty"]
    assert names(due_date_order="asc") == ["Busy", "Done", "Empty"]
    assert names(due_date_order="desc") == ["Empty", "Done", "Busy"]
    assert names(task_count_order="asc", due_date_order="desc") == ["Empty", "Busy", "Done"]

    statuses = {p["name"]: p["status"] for p in client.get(f"{API}/projects", headers=auth_headers).json()["data"]}
    assert statuses == {"Done": "Completed", "Empty": "No Tasks", "Busy": "In Progress"}


def test_board_columns(client, auth_headers, project_id):
    first = create_task(client, auth_headers, project_id, title="first")
    create_task(client, auth_headers, project_id, title="second", status="IN_REVIEW")
    third = create_task(client, auth_headers, project_id, title="third")

    response = client.get(f"{API}/projects/{project_id}/board", headers=auth_headers)
    assert response.status_code == 200
    columns = response.json()["data"]
    assert [c["label"] for c in columns] == ["To Do", "In Progress", "In Review", "Completed"]
    assert [t["id"] for t in columns[0]["tasks"]] == [first["id"], third["id"]]
    assert [t["title"] for t in columns[2]["tasks"]] == ["second"]
    assert columns[1]["tasks"] == [] and columns[3]["tasks"] == []


def test_teams_and_assignment(client, auth_headers, project_id):
    response = client.post(f"{API}/teams", json={"name": "Core", "description": "Main"}, headers=auth_headers)
    assert response.status_code == 201
    team_id = response.json()["data"]["id"]

    assert [t["name"] for t in client.get(f"{API}/teams", headers=auth_headers).json()["data"]] == ["Core"]

    assigned = client.post(f"{API}/projects/{project_id}/teams/{team_id}", headers=auth_headers)
    assert assigned.status_code == 200
    assert assigned.json()["data"]["teams"] == [{"id": team_id, "name": "Core"}]

    again = client.post(f"{API}/projects/{project_id}/teams/{team_id}", headers=auth_headers)
    assert again.status_code == 409
    assert again.json()["error_code"] == "TEAM_ALREADY_ASSIGNED"

    missing = client.post(f"{API}/projects/{project_id}/teams/999", headers=auth_headers)
    assert missing.status_code == 404
