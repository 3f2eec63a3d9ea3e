"""
Tests for the REST surface.

Status codes and bodies the client depends on:
- 201 / 204 with empty bodies for creates, updates and deletes
- 200 with the mission for delegation and report actions
- {message} for client errors, {message, details, code} for failures
"""
from unittest.mock import patch

from fastapi.testclient import TestClient

from mission_manager.auth import hash_password


def _create_mission(client, admin, assignee, checklist=None):
    before = {m["id"] for m in client.get("/api/missions").json()}
    response = client.post("/api/missions", json={
        "subject": "Site inspection",
        "location": "Plant 3",
        "starttime": "2026-10-20T08:00:00Z",
        "endtime": "2026-10-20T16:00:00Z",
        "assignedto": assignee.id,
        "createdby": admin.id,
        "checklist": checklist or [{"category": "Safety", "steps": ["check A", "check B"]}],
    })
    assert response.status_code == 201
    assert response.content == b""
    created = [m for m in client.get("/api/missions").json() if m["id"] not in before]
    assert len(created) == 1
    return created[0]


# =============================================================================
# LOGIN
# =============================================================================

class TestLogin:

    def test_login_returns_user_without_credential(self, client, make_user):
        make_user("sara", password_hash=hash_password("secret-pass"))

        response = client.post("/api/login", json={"username": "sara", "password": "secret-pass"})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "sara"
        assert body["role"] == "EMPLOYEE"
        assert "password" not in body and "password_hash" not in body

    def test_wrong_password(self, client, make_user):
        make_user("sara", password_hash=hash_password("secret-pass"))

        response = client.post("/api/login", json={"username": "sara", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"message": "Incorrect password"}

    def test_unknown_user(self, client):
        response = client.post("/api/login", json={"username": "nobody", "password": "x"})

        assert response.status_code == 401
        assert "message" in response.json()


# =============================================================================
# USERS
# =============================================================================

class TestUsers:

    def test_create_list_update(self, client):
        response = client.post("/api/users", json={
            "name": "omid", "password": "pw-123456", "department": "SALES", "phone": "555-0101",
        })
        assert response.status_code == 201
        assert response.content == b""

        users = client.get("/api/users").json()
        assert [u["name"] for u in users] == ["omid"]
        user_id = users[0]["id"]

        response = client.put(f"/api/users/{user_id}", json={"phone": "555-0199", "password": "new-pass-1"})
        assert response.status_code == 204

        user = client.get("/api/users").json()[0]
        assert user["phone"] == "555-0199"
        assert user["department"] == "SALES"
        assert client.post("/api/login", json={"username": "omid", "password": "new-pass-1"}).status_code == 200

    def test_duplicate_name(self, client, make_user):
        make_user("omid")

        response = client.post("/api/users", json={"name": "omid", "password": "pw-123456"})

        assert response.status_code == 400
        assert response.json() == {"message": "User name already taken"}

    def test_update_unknown_user(self, client):
        assert client.put("/api/users/ghost", json={"phone": "1"}).status_code == 404

    def test_delete_user_purges_assigned_missions(self, client, admin, e1, e2):
        _create_mission(client, admin, e1)
        kept = _create_mission(client, admin, e2)
        e1_id = e1.id

        response = client.delete(f"/api/users/{e1_id}")

        assert response.status_code == 204
        assert [m["id"] for m in client.get("/api/missions").json()] == [kept["id"]]
        assert e1_id not in [u["id"] for u in client.get("/api/users").json()]

    def test_performance(self, client, admin, e1):
        mission = _create_mission(client, admin, e1)
        client.post(f"/api/missions/{mission['id']}/reports", json={
            "reporterId": e1.id, "departureTime": "08:00", "returnTime": "15:00",
            "summary": "done", "status": "COMPLETED",
        })

        body = client.get(f"/api/users/{e1.id}/performance").json()

        assert body["assignedTotal"] == 1
        assert body["byStatus"]["COMPLETED"] == 1
        assert body["reportsFiled"] == 1
        assert body["completionRate"] == 100.0


# =============================================================================
# MISSIONS
# =============================================================================

class TestMissions:

    def test_create_shape(self, client, admin, e1):
        mission = _create_mission(client, admin, e1)

        assert mission["status"] == "NEW"
        assert mission["checkliststate"] == {"Safety": {"check A": False, "check B": False}}
        assert mission["reports"] == []
        for field in ("delegated_by", "delegation_target", "delegation_reason", "delegation_status"):
            assert mission[field] is None

    def test_create_missing_fields(self, client, admin):
        response = client.post("/api/missions", json={"subject": "x", "createdby": admin.id})

        assert response.status_code == 400
        body = response.json()
        assert body["missingFields"] == ["location", "starttime", "endtime", "assignedto"]
        assert "message" in body

    def test_view_filtering(self, client, admin, e1, e2):
        mine = _create_mission(client, admin, e1)
        _create_mission(client, admin, e2)

        response = client.get("/api/missions", params={"userId": e1.id, "view": "MY_MISSIONS", "status": "NEW"})

        assert [m["id"] for m in response.json()] == [mine["id"]]

    def test_invalid_view(self, client, e1):
        response = client.get("/api/missions", params={"userId": e1.id, "view": "NOPE"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request"

    def test_schedule_update(self, client, admin, e1):
        mission = _create_mission(client, admin, e1)
        mission["location"] = "Plant 4"

        response = client.put(f"/api/missions/{mission['id']}", json=mission)

        assert response.status_code == 204
        stored = client.get(f"/api/missions/{mission['id']}").json()
        assert stored["location"] == "Plant 4"
        assert stored["status"] == "NEW"

    def test_report_through_put_is_refused(self, client, admin, e1):
        mission = _create_mission(client, admin, e1)
        mission["status"] = "IN_PROGRESS"
        mission["reports"] = [{
            "id": "r1", "reporterId": e1.id, "departureTime": "08:00", "returnTime": "12:00",
            "summary": "done", "checklistSnapshot": {},
        }]

        response = client.put(f"/api/missions/{mission['id']}", json=mission)

        assert response.status_code == 400
        body = response.json()
        assert f"POST /api/missions/{mission['id']}/reports" in body["message"]
        assert "missingFields" not in body
        stored = client.get(f"/api/missions/{mission['id']}").json()
        assert stored["status"] == "NEW"
        assert stored["reports"] == []

    def test_delete_by_user(self, client, admin, e1):
        _create_mission(client, admin, e1)

        assert client.delete(f"/api/missions/user/{e1.id}").status_code == 204
        assert client.get("/api/missions").json() == []

    def test_unknown_mission(self, client):
        response = client.get("/api/missions/missing")

        assert response.status_code == 404
        assert response.json() == {"message": "Mission not found"}


# =============================================================================
# REPORTS AND DELEGATION
# =============================================================================

class TestDelegationFlow:

    def test_full_cycle(self, client, admin, e1, e2):
        mission = _create_mission(client, admin, e1)
        url = f"/api/missions/{mission['id']}"

        response = client.post(f"{url}/reports", json={
            "reporterId": e1.id, "departureTime": "08:00", "returnTime": "12:00",
            "summary": "first half", "checklistState": {"Safety": {"check A": True}},
        })
        assert response.status_code == 200
        assert response.json()["status"] == "IN_PROGRESS"

        response = client.post(f"{url}/delegate", json={
            "targetUserId": e2.id, "reason": "shift change", "initiatorId": e1.id,
        })
        assert response.status_code == 200
        body = response.json()
        assert body["delegation_status"] == "PENDING"
        assert body["assignedto"] == e1.id

        pending = client.get("/api/missions", params={"userId": e2.id, "view": "DELEGATIONS"}).json()
        assert [m["id"] for m in pending] == [mission["id"]]

        response = client.post(f"{url}/accept", json={"userId": e2.id})
        assert response.status_code == 200
        assert response.json()["assignedto"] == e2.id

        response = client.post(f"{url}/reports", json={
            "reporterId": e2.id, "departureTime": "13:00", "returnTime": "17:00",
            "summary": "second half", "checklistState": {"Safety": {"check B": True}},
            "status": "COMPLETED",
        })
        body = response.json()
        assert len(body["reports"]) == 2
        assert body["checkliststate"] == {"Safety": {"check A": True, "check B": True}}
        assert body["status"] == "COMPLETED"

        response = client.post(f"{url}/clear-delegation", json={"userId": e1.id})
        assert response.status_code == 200
        assert response.json()["delegation_status"] is None

    def test_wrong_user_accepts(self, client, admin, e1, e2, e3):
        mission = _create_mission(client, admin, e1)
        url = f"/api/missions/{mission['id']}"
        client.post(f"{url}/delegate", json={"targetUserId": e2.id, "reason": "", "initiatorId": e1.id})

        response = client.post(f"{url}/accept", json={"userId": e3.id})

        assert response.status_code == 403
        assert response.json() == {"message": "This mission has not been delegated to you"}

    def test_non_assignee_cannot_delegate(self, client, admin, e1, e2):
        mission = _create_mission(client, admin, e1)

        response = client.post(f"/api/missions/{mission['id']}/delegate", json={
            "targetUserId": e2.id, "reason": "", "initiatorId": e2.id,
        })

        assert response.status_code == 403

    def test_delegate_unknown_mission(self, client, e1, e2):
        response = client.post("/api/missions/missing/delegate", json={
            "targetUserId": e2.id, "reason": "", "initiatorId": e1.id,
        })

        assert response.status_code == 404

    def test_report_on_completed_mission(self, client, admin, e1):
        mission = _create_mission(client, admin, e1)
        url = f"/api/missions/{mission['id']}/reports"
        payload = {"reporterId": e1.id, "departureTime": "08:00", "returnTime": "12:00", "summary": "done"}
        client.post(url, json={**payload, "status": "COMPLETED"})

        response = client.post(url, json=payload)

        assert response.status_code == 400
        assert "message" in response.json()

    def test_visible_reports(self, client, admin, e1, e3):
        mission = _create_mission(client, admin, e1)
        url = f"/api/missions/{mission['id']}/reports"
        client.post(url, json={"reporterId": e1.id, "departureTime": "08:00", "returnTime": "12:00", "summary": "s"})

        assert len(client.get(url, params={"userId": admin.id}).json()) == 1
        assert client.get(url, params={"userId": e3.id}).json() == []


# =============================================================================
# FAILURES
# =============================================================================

class TestUnhandledErrors:

    def test_unexpected_error_becomes_500(self, client):
        from mission_manager.main import app

        failing = TestClient(app, raise_server_exceptions=False)
        with patch(
            "mission_manager.routers.missions.MissionService.list_missions",
            side_effect=RuntimeError("database unavailable"),
        ):
            response = failing.get("/api/missions")

        assert response.status_code == 500
        assert response.json() == {"message": "database unavailable", "details": None, "code": None}

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
