def _okr(client, headers, title, department, current, quarter="Q1"):
    response = client.post("/api/okrs/", json={
        "title": title,
        "quarter": quarter,
        "year": 2025,
        "department": department,
        "key_results": [{"title": "KR", "target_value": 100, "current_value": current, "unit": "%"}],
    }, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_summary_groups_by_department(client, admin_user, auth_headers):
    headers = auth_headers(admin_user)
    _okr(client, headers, "A", "Sales", 40)
    _okr(client, headers, "B", "Sales", 61)
    _okr(client, headers, "C", "Ops", 100)
    _okr(client, headers, "Other quarter", "Ops", 0, quarter="Q4")

    client.post("/api/tasks/", json={"title": "t1"}, headers=headers)
    client.post("/api/tasks/", json={"title": "t2", "status": "DONE"}, headers=headers)

    response = client.get("/api/reports/summary", params={"quarter": "Q1", "year": 2025}, headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_okrs"] == 3
    # (40 + 61 + 100) / 3 = 67
    assert data["avg_progress"] == 67
    by_dept = {d["department"]: d for d in data["okrs_by_department"]}
    assert by_dept["Sales"]["count"] == 2
    # (40 + 61) / 2 = 50.5
    assert by_dept["Sales"]["avg_progress"] == 51
    assert by_dept["Ops"]["avg_progress"] == 100
    assert data["task_status_counts"] == {"TODO": 1, "IN_PROGRESS": 0, "DONE": 1}


def test_summary_empty(client, employee_user, auth_headers):
    response = client.get("/api/reports/summary", headers=auth_headers(employee_user))
    assert response.status_code == 200
    data = response.json()
    assert data["total_okrs"] == 0
    assert data["avg_progress"] == 0
    assert data["okrs_by_department"] == []
