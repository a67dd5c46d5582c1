import pytest
from fastapi import status


def _payload(**overrides):
    payload = {
        "title": "Get certified",
        "quarter": "Q2",
        "year": 2025,
        "key_results": [
            {"title": "Modules finished", "target_value": 8, "current_value": 2, "unit": "modules"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def my_okr(client, employee_user, auth_headers):
    response = client.post("/api/my-okrs/", json=_payload(), headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_forces_owner_and_personal_type(client, employee_user, manager_user, auth_headers):
    response = client.post("/api/my-okrs/", json=_payload(owner_id=manager_user.id, owner_name="Someone else"),
                           headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["owner_id"] == employee_user.id
    assert data["owner_name"] == employee_user.name
    assert data["department"] == "Sales"
    assert data["type"] == "PERSONAL"
    assert data["is_personal"] is True
    assert data["progress"] == 25


def test_create_validates_key_results(client, employee_user, auth_headers):
    response = client.post("/api/my-okrs/", json=_payload(key_results=[]), headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["msg"] == "At least one Key Result is required"


def test_list_shows_only_own_okrs(client, my_okr, manager_user, employee_user, auth_headers):
    client.post("/api/my-okrs/", json=_payload(title="Manager goal"), headers=auth_headers(manager_user))
    client.post("/api/my-okrs/", json=_payload(title="Later", quarter="Q3"), headers=auth_headers(employee_user))

    mine = client.get("/api/my-okrs/", params={"quarter": "Q2", "year": 2025}, headers=auth_headers(employee_user))
    assert mine.status_code == 200
    assert [o["id"] for o in mine.json()] == [my_okr["id"]]


def test_other_users_cannot_reach_personal_okr(client, my_okr, manager_user, auth_headers):
    headers = auth_headers(manager_user)
    url = f"/api/my-okrs/{my_okr['id']}"

    for response in (
        client.get(url, headers=headers),
        client.put(url, json={"title": "Mine now"}, headers=headers),
        client.delete(url, headers=headers),
    ):
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["errors"][0]["msg"] == "OKR not found or not owned by you"


def test_update_keeps_owner(client, my_okr, employee_user, manager_user, auth_headers):
    response = client.put(f"/api/my-okrs/{my_okr['id']}", json={
        "title": "Get certified twice",
        "owner_id": manager_user.id,
        "owner_name": "Someone else",
    }, headers=auth_headers(employee_user))
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Get certified twice"
    assert data["owner_id"] == employee_user.id
    assert data["owner_name"] == employee_user.name


def test_update_rejects_null_status(client, my_okr, employee_user, auth_headers):
    response = client.put(f"/api/my-okrs/{my_okr['id']}", json={"status": None}, headers=auth_headers(employee_user))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["details"] == {"fields": ["status"]}


def test_status_and_key_result_endpoints(client, my_okr, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    base = f"/api/my-okrs/{my_okr['id']}"

    response = client.patch(f"{base}/status", json={"status": "ON_TRACK"}, headers=headers)
    assert response.json()["status"] == "ON_TRACK"

    response = client.post(f"{base}/keyresults", json={"title": "Practice exams", "target_value": 4, "unit": "exams"},
                           headers=headers)
    assert response.status_code == 200
    added = response.json()["key_results"][1]
    assert added["progress"] == 0
    # (25 + 0) / 2 = 12.5
    assert response.json()["progress"] == 13

    response = client.put(f"{base}/keyresults/{added['id']}", json={"current_value": 4}, headers=headers)
    assert response.json()["key_results"][1]["progress"] == 100

    response = client.delete(f"{base}/keyresults/{added['id']}", headers=headers)
    assert [kr["title"] for kr in response.json()["key_results"]] == ["Modules finished"]
    assert response.json()["progress"] == 25


def test_delete_personal_okr(client, my_okr, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    response = client.delete(f"/api/my-okrs/{my_okr['id']}", headers=headers)
    assert response.json() == {"message": "OKR deleted"}
    assert client.get(f"/api/my-okrs/{my_okr['id']}", headers=headers).status_code == status.HTTP_404_NOT_FOUND


def test_tasks_drive_personal_key_result(client, my_okr, employee_user, auth_headers):
    headers = auth_headers(employee_user)
    kr_id = my_okr["key_results"][0]["id"]
    task = client.post("/api/tasks/", json={"title": "Finish module 3", "kr_id": kr_id}, headers=headers).json()
    client.post("/api/tasks/", json={"title": "Finish module 4", "kr_id": kr_id}, headers=headers)

    client.patch(f"/api/tasks/{task['id']}/status", json={"status": "DONE"}, headers=headers)

    refreshed = client.get(f"/api/my-okrs/{my_okr['id']}", headers=headers).json()
    assert refreshed["key_results"][0]["progress"] == 50
    assert refreshed["progress"] == 50


def test_personal_okrs_left_out_of_report(client, my_okr, admin_user, auth_headers):
    summary = client.get("/api/reports/summary", headers=auth_headers(admin_user)).json()
    assert summary["total_okrs"] == 0


def test_requires_authentication(client):
    assert client.get("/api/my-okrs/").status_code == status.HTTP_401_UNAUTHORIZED
