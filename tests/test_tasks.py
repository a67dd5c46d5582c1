import pytest
from fastapi import status


@pytest.fixture
def okr(client, manager_user, auth_headers):
    response = client.post("/api/okrs/", json={
        "title": "Ship v2",
        "quarter": "Q3",
        "year": 2025,
        "key_results": [
            {"title": "Features done", "target_value": 10, "unit": "features"},
            {"title": "Bugs closed", "target_value": 50, "current_value": 50, "unit": "bugs"},
        ],
    }, headers=auth_headers(manager_user))
    assert response.status_code == 200, response.text
    return response.json()


def _kr(client, headers, okr_id, index=0):
    return client.get(f"/api/okrs/{okr_id}", headers=headers).json()["key_results"][index]


def test_create_task_fills_snapshots(client, okr, manager_user, employee_user, auth_headers):
    headers = auth_headers(manager_user)
    kr_id = okr["key_results"][0]["id"]
    response = client.post("/api/tasks/", json={
        "title": "Build export",
        "kr_id": kr_id,
        "assignee_id": employee_user.id,
    }, headers=headers)
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "TODO"
    assert data["priority"] == "MEDIUM"
    assert data["kr_title"] == "Features done"
    assert data["assignee_name"] == employee_user.name


def test_task_status_drives_key_result_progress(client, okr, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    kr_id = okr["key_results"][0]["id"]
    ids = [
        client.post("/api/tasks/", json={"title": f"Task {i}", "kr_id": kr_id}, headers=headers).json()["id"]
        for i in range(4)
    ]

    client.patch(f"/api/tasks/{ids[0]}/status", json={"status": "DONE"}, headers=headers)
    assert _kr(client, headers, okr["id"])["progress"] == 25

    client.patch(f"/api/tasks/{ids[1]}/status", json={"status": "DONE"}, headers=headers)
    client.patch(f"/api/tasks/{ids[2]}/status", json={"status": "IN_PROGRESS"}, headers=headers)
    assert _kr(client, headers, okr["id"])["progress"] == 50

    objective = client.get(f"/api/okrs/{okr['id']}", headers=headers).json()
    # KR progress 50 and 100 with equal weight
    assert objective["progress"] == 75


def test_deleting_task_recalculates(client, okr, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    kr_id = okr["key_results"][0]["id"]
    done = client.post("/api/tasks/", json={"title": "Done", "kr_id": kr_id, "status": "DONE"}, headers=headers).json()
    todo = client.post("/api/tasks/", json={"title": "Todo", "kr_id": kr_id}, headers=headers).json()
    assert _kr(client, headers, okr["id"])["progress"] == 50

    response = client.delete(f"/api/tasks/{todo['id']}", headers=headers)
    assert response.status_code == 200
    assert _kr(client, headers, okr["id"])["progress"] == 100
    assert client.get(f"/api/tasks/{done['id']}", headers=headers).status_code == 200


def test_moving_task_recalculates_old_key_result(client, okr, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    first_kr, second_kr = okr["key_results"][0]["id"], okr["key_results"][1]["id"]
    client.post("/api/tasks/", json={"title": "Stays", "kr_id": first_kr}, headers=headers)
    mover = client.post("/api/tasks/", json={"title": "Moves", "kr_id": first_kr, "status": "DONE"}, headers=headers).json()
    assert _kr(client, headers, okr["id"], 0)["progress"] == 50

    response = client.put(f"/api/tasks/{mover['id']}", json={"kr_id": second_kr, "kr_title": None}, headers=headers)
    assert response.status_code == 200
    assert response.json()["kr_title"] == "Bugs closed"
    assert _kr(client, headers, okr["id"], 0)["progress"] == 0
    assert _kr(client, headers, okr["id"], 1)["progress"] == 100


def test_task_kpi_link_updates_kpi(client, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    kpi = client.post("/api/kpis/", json={
        "title": "Tickets handled",
        "type": "DEPARTMENT",
        "department": "Sales",
        "target_value": 200,
        "quarter": "Q3",
        "year": 2025,
    }, headers=headers).json()

    a = client.post("/api/tasks/", json={"title": "A", "kpi_id": kpi["id"], "status": "DONE"}, headers=headers).json()
    client.post("/api/tasks/", json={"title": "B", "kpi_id": kpi["id"], "status": "IN_PROGRESS"}, headers=headers)

    refreshed = client.get(f"/api/kpis/{kpi['id']}", headers=headers).json()
    # mean(100, 50) = 75 -> 75% of 200
    assert refreshed["progress"] == 75
    assert refreshed["current_value"] == 150

    client.patch(f"/api/tasks/{a['id']}/status", json={"status": "TODO"}, headers=headers)
    refreshed = client.get(f"/api/kpis/{kpi['id']}", headers=headers).json()
    assert refreshed["progress"] == 25


def test_assign_task(client, manager_user, employee_user, auth_headers):
    headers = auth_headers(manager_user)
    task = client.post("/api/tasks/", json={"title": "Unassigned"}, headers=headers).json()
    response = client.patch(f"/api/tasks/{task['id']}/assign", json={"assignee_id": employee_user.id}, headers=headers)
    assert response.status_code == 200
    assert response.json()["assignee_id"] == employee_user.id
    assert response.json()["assignee_name"] == employee_user.name

    listed = client.get("/api/tasks/", params={"assignee_id": employee_user.id}, headers=headers).json()
    assert [t["id"] for t in listed] == [task["id"]]


def test_list_tasks_by_status(client, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    client.post("/api/tasks/", json={"title": "Open"}, headers=headers)
    client.post("/api/tasks/", json={"title": "Closed", "status": "DONE"}, headers=headers)
    listed = client.get("/api/tasks/", params={"status": "DONE"}, headers=headers).json()
    assert [t["title"] for t in listed] == ["Closed"]


def test_invalid_task_status_rejected(client, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    task = client.post("/api/tasks/", json={"title": "X"}, headers=headers).json()
    response = client.patch(f"/api/tasks/{task['id']}/status", json={"status": "BLOCKED"}, headers=headers)
    assert response.status_code == 422


def test_missing_task_returns_404(client, manager_user, auth_headers):
    response = client.get("/api/tasks/12345", headers=auth_headers(manager_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["errors"][0]["msg"] == "Task not found"


@pytest.mark.parametrize("field", ["title", "status", "priority"])
def test_update_task_rejects_null_required_field(client, manager_user, auth_headers, field):
    headers = auth_headers(manager_user)
    task = client.post("/api/tasks/", json={"title": "Write docs"}, headers=headers).json()

    response = client.put(f"/api/tasks/{task['id']}", json={field: None}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["details"] == {"fields": [field]}
    assert client.get(f"/api/tasks/{task['id']}", headers=headers).json()[field] == task[field]


def test_update_task_can_unlink_key_result(client, okr, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    kr_id = okr["key_results"][0]["id"]
    task = client.post("/api/tasks/", json={"title": "Unlinked later", "kr_id": kr_id}, headers=headers).json()

    response = client.put(f"/api/tasks/{task['id']}", json={"kr_id": None, "due_date": None}, headers=headers)
    assert response.status_code == 200
    assert response.json()["kr_id"] is None


def test_kpi_keeps_progress_when_last_task_moves_away(client, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    kpi_payload = {"type": "DEPARTMENT", "department": "Sales", "target_value": 10, "quarter": "Q3", "year": 2025}
    first = client.post("/api/kpis/", json={"title": "First", **kpi_payload}, headers=headers).json()
    second = client.post("/api/kpis/", json={"title": "Second", **kpi_payload}, headers=headers).json()

    task = client.post("/api/tasks/", json={"title": "Only task", "kpi_id": first["id"], "status": "DONE"},
                       headers=headers).json()
    assert client.get(f"/api/kpis/{first['id']}", headers=headers).json()["progress"] == 100

    client.put(f"/api/tasks/{task['id']}", json={"kpi_id": second["id"]}, headers=headers)

    assert client.get(f"/api/kpis/{second['id']}", headers=headers).json()["progress"] == 100
    left_behind = client.get(f"/api/kpis/{first['id']}", headers=headers).json()
    assert left_behind["progress"] == 100
    assert left_behind["current_value"] == 10
