"""Tests for the project CRUD API endpoints."""

from sqlmodel import select

from projecthub.config import settings
from projecthub.models.project import ProjectMember
from projecthub.models.task import Task


def _as(user_id):
    return {"X-User-ID": str(user_id)}


def _create_project(client, user_id=1, **overrides):
    payload = {"name": "Launch", **overrides}
    resp = client.post("/api/v1/projects", json=payload, headers=_as(user_id))
    assert resp.status_code == 201, resp.text
    return resp.json()


def _add_task(client, project_id, user_id=1, **overrides):
    payload = {"title": "Task", "project_id": project_id, **overrides}
    resp = client.post("/api/v1/tasks", json=payload, headers=_as(user_id))
    assert resp.status_code == 201, resp.text
    return resp.json()


# === Create ===


def test_create_project_with_members(client):
    """User 1 creating {Launch, members [2, 3]} leads it with members {2, 3}."""
    data = _create_project(client, members=[2, 3])
    assert data["leader"]["id"] == 1
    assert {m["id"] for m in data["members"]} == {2, 3}
    assert data["role"] == "leader"
    assert data["is_leader"] is True
    assert data["completed_tasks"] == 0
    assert data["total_tasks"] == 0
    assert data["progress"] == 0.0


def test_create_ignores_submitted_leader(client):
    data = _create_project(client, user_id=2, leader_id=3, leader={"id": 3})
    assert data["leader"]["id"] == 2


def test_create_leader_summary_has_identity_fields_only(client):
    data = _create_project(client, members=[2])
    assert set(data["leader"]) == {"id", "name", "email"}
    assert set(data["members"][0]) == {"id", "name", "email"}


def test_create_with_all_fields(client):
    data = _create_project(
        client,
        description="Public website relaunch",
        price=1500.5,
        start_date="2025-01-01",
        end_date="2025-01-01",
    )
    assert data["description"] == "Public website relaunch"
    assert data["price"] == 1500.5
    assert data["start_date"] == "2025-01-01"
    assert data["end_date"] == "2025-01-01"


def test_create_rejects_end_before_start(client):
    resp = client.post(
        "/api/v1/projects",
        json={"name": "Launch", "start_date": "2025-01-01", "end_date": "2024-12-31"},
        headers=_as(1),
    )
    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail[0]["loc"] == ["body", "end_date"]
    assert "start_date" in detail[0]["msg"]


def test_create_rejects_unknown_member(client):
    resp = client.post("/api/v1/projects", json={"name": "Launch", "members": [2, 404]}, headers=_as(1))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "members"]
    assert client.get("/api/v1/projects", headers=_as(1)).json() == []


def test_create_validation_errors(client):
    for payload in (
        {},
        {"name": ""},
        {"name": "x" * 256},
        {"name": "Launch", "price": -1},
        {"name": "Launch", "start_date": "31/12/2024"},
    ):
        resp = client.post("/api/v1/projects", json=payload, headers=_as(1))
        assert resp.status_code == 422, payload


def test_create_requires_current_user(client):
    resp = client.post("/api/v1/projects", json={"name": "Launch"})
    assert resp.status_code == 401
    resp = client.post("/api/v1/projects", json={"name": "Launch"}, headers=_as(99))
    assert resp.status_code == 401


def test_create_form_lists_other_users(client):
    resp = client.get("/api/v1/projects/create", headers=_as(2))
    assert resp.status_code == 200
    assert {u["id"] for u in resp.json()["users"]} == {1, 3, 4}


# === List / stats ===


def test_list_projects_for_leader_and_member(client):
    led = _create_project(client, user_id=1, name="Ana leads")
    joined = _create_project(client, user_id=2, name="Ana joins", members=[1])
    _create_project(client, user_id=3, name="Elsewhere")

    resp = client.get("/api/v1/projects", headers=_as(1))
    assert resp.status_code == 200
    data = resp.json()
    assert [p["id"] for p in data] == [joined["id"], led["id"]]
    assert [p["role"] for p in data] == ["member", "leader"]


def test_list_projects_search(client):
    _create_project(client, name="Website Launch")
    _create_project(client, name="Office move")
    resp = client.get("/api/v1/projects?search=launch", headers=_as(1))
    assert [p["name"] for p in resp.json()] == ["Website Launch"]


def test_list_projects_reports_live_progress(client):
    project = _create_project(client)
    _add_task(client, project["id"], status="completed")
    _add_task(client, project["id"])
    data = client.get("/api/v1/projects", headers=_as(1)).json()[0]
    assert data["completed_tasks"] == 1
    assert data["total_tasks"] == 2
    assert data["progress"] == 50.0


def test_project_stats(client):
    first = _create_project(client, price=100, members=[2, 3])
    _create_project(client, price=50.5, members=[4])
    _add_task(client, first["id"], status="completed")

    resp = client.get("/api/v1/projects/stats", headers=_as(1))
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total_projects"] == 2
    assert stats["total_budget"] == 150.5
    assert stats["team_members"] == 3
    assert stats["average_progress"] == 50


# === Show ===


def test_get_project_detail(client):
    created = _create_project(client, members=[2])
    _add_task(client, created["id"], title="First")
    _add_task(client, created["id"], title="Second")

    resp = client.get(f"/api/v1/projects/{created['id']}", headers=_as(2))
    assert resp.status_code == 200
    data = resp.json()
    assert [t["title"] for t in data["tasks"]] == ["First", "Second"]
    assert data["is_member"] is True
    assert data["is_leader"] is False
    assert {u["id"] for u in data["available_users"]} == {3, 4}


def test_get_project_not_found(client):
    resp = client.get("/api/v1/projects/999", headers=_as(1))
    assert resp.status_code == 404


def test_get_project_refused_for_outsider(client):
    created = _create_project(client, members=[2])
    resp = client.get(f"/api/v1/projects/{created['id']}", headers=_as(3))
    assert resp.status_code == 403


def test_get_project_open_when_membership_not_enforced(client, monkeypatch):
    monkeypatch.setattr(settings, "enforce_membership", False)
    created = _create_project(client, members=[2])
    resp = client.get(f"/api/v1/projects/{created['id']}", headers=_as(3))
    assert resp.status_code == 200
    assert resp.json()["is_member"] is False


def test_list_project_tasks(client):
    created = _create_project(client)
    _add_task(client, created["id"], title="A")
    _add_task(client, created["id"], title="B")
    resp = client.get(f"/api/v1/projects/{created['id']}/tasks", headers=_as(1))
    assert resp.status_code == 200
    assert [t["title"] for t in resp.json()] == ["A", "B"]


# === Update ===


def test_update_project_fields(client):
    created = _create_project(client, description="old", price=10)
    resp = client.put(
        f"/api/v1/projects/{created['id']}",
        json={"name": "Relaunch", "end_date": "2025-06-30"},
        headers=_as(1),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Relaunch"
    assert data["end_date"] == "2025-06-30"
    # Unchanged fields preserved
    assert data["description"] == "old"
    assert data["price"] == 10


def test_update_replaces_members_but_keeps_leader(client):
    created = _create_project(client, members=[2, 3])
    resp = client.put(f"/api/v1/projects/{created['id']}", json={"member_ids": [3, 4]}, headers=_as(1))
    assert resp.status_code == 200
    assert {m["id"] for m in resp.json()["members"]} == {1, 3, 4}


def test_update_refused_for_member(client):
    created = _create_project(client, members=[2])
    resp = client.put(f"/api/v1/projects/{created['id']}", json={"name": "Mine now"}, headers=_as(2))
    assert resp.status_code == 403


def test_update_stays_leader_only_when_not_enforced(client, monkeypatch):
    monkeypatch.setattr(settings, "enforce_membership", False)
    created = _create_project(client, members=[2])
    resp = client.put(f"/api/v1/projects/{created['id']}", json={"name": "Mine now"}, headers=_as(3))
    assert resp.status_code == 403


def test_update_rejects_end_before_stored_start(client):
    created = _create_project(client, start_date="2025-01-01")
    resp = client.put(f"/api/v1/projects/{created['id']}", json={"end_date": "2024-12-31"}, headers=_as(1))
    assert resp.status_code == 422
    assert client.get(f"/api/v1/projects/{created['id']}", headers=_as(1)).json()["end_date"] is None


def test_update_not_found(client):
    resp = client.put("/api/v1/projects/999", json={"name": "x"}, headers=_as(1))
    assert resp.status_code == 404


# === Delete ===


def test_delete_project_cascades(client, session):
    created = _create_project(client, members=[2, 3])
    _add_task(client, created["id"])
    _add_task(client, created["id"], user_id=2)

    resp = client.delete(f"/api/v1/projects/{created['id']}", headers=_as(1))
    assert resp.status_code == 204

    assert client.get(f"/api/v1/projects/{created['id']}", headers=_as(1)).status_code == 404
    assert session.exec(select(Task).where(Task.project_id == created["id"])).all() == []
    assert session.exec(
        select(ProjectMember).where(ProjectMember.project_id == created["id"])
    ).all() == []


def test_delete_project_refused_for_member(client):
    created = _create_project(client, members=[2])
    resp = client.delete(f"/api/v1/projects/{created['id']}", headers=_as(2))
    assert resp.status_code == 403
    assert client.get(f"/api/v1/projects/{created['id']}", headers=_as(1)).status_code == 200


def test_delete_project_not_found(client):
    resp = client.delete("/api/v1/projects/999", headers=_as(1))
    assert resp.status_code == 404


# === Edge input ===


def test_search_treats_wildcards_literally(client):
    _create_project(client, name="Alpha")
    _create_project(client, name="Beta")
    _create_project(client, name="site_v2")

    for needle in ("%", "_v"):
        resp = client.get("/api/v1/projects", params={"search": needle}, headers=_as(1))
        names = [p["name"] for p in resp.json()]
        assert "Alpha" not in names and "Beta" not in names
    resp = client.get("/api/v1/projects", params={"search": "_"}, headers=_as(1))
    assert [p["name"] for p in resp.json()] == ["site_v2"]


def test_ids_beyond_integer_range(client):
    created = _create_project(client, members=[2])
    huge = 2**63

    assert client.get(f"/api/v1/projects/{huge}", headers=_as(1)).status_code == 404
    assert client.put(f"/api/v1/projects/{huge}", json={"name": "x"}, headers=_as(1)).status_code == 404
    assert client.delete(f"/api/v1/projects/{huge}", headers=_as(1)).status_code == 404

    resp = client.post("/api/v1/projects", json={"name": "Launch", "members": [huge]}, headers=_as(1))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "members"]

    resp = client.put(f"/api/v1/projects/{created['id']}", json={"member_ids": [3, huge]}, headers=_as(1))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "member_ids"]
