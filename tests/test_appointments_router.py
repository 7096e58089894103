import pytest
from fastapi.testclient import TestClient

from app.database import get_session
from app.main import app
from app.utils import create_jwt_token


def auth_header(**claims):
    token = create_jwt_token({"sub": "user-1", **claims})
    return {"Authorization": f"Bearer {token}"}


MANAGER = {"privileges": ["Manage Appointments", "View Appointments"]}
READER = {"privileges": ["View Appointments"]}
NOBODY = {"privileges": []}

NEW_APPOINTMENT = {
    "patient_id": 1,
    "service_id": 1,
    "start_date_time": "2108-08-15T10:00:00Z",
    "end_date_time": "2108-08-15T10:30:00Z",
    "appointment_kind": "Scheduled",
    "providers": [
        {"provider_id": 2220, "response": "ACCEPTED"},
        {"provider_id": 2220, "response": "AWAITING"},
    ],
}


@pytest.fixture
def client(seeded):
    def override_session():
        yield seeded

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_missing_token_is_unauthenticated(client):
    r = client.get("/api/v1/appointments/all")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_invalid_token_is_rejected(client):
    r = client.get("/api/v1/appointments/all", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_save_requires_manage_privilege(client):
    r = client.post("/api/v1/appointments/", json=NEW_APPOINTMENT, headers=auth_header(**READER))
    assert r.status_code == 403
    assert r.json()["error"] == "Privileges required: Manage Appointments"


def test_save_appointment(client):
    r = client.post("/api/v1/appointments/", json=NEW_APPOINTMENT, headers=auth_header(**MANAGER))
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == 5
    assert body["status"] == "Scheduled"
    assert body["start_date_time"].startswith("2108-08-15T10:00:00")
    assert [p["response"] for p in body["providers"]] == ["ACCEPTED", "AWAITING"]


def test_save_invalid_appointment_is_bad_request(client):
    payload = dict(NEW_APPOINTMENT, end_date_time="2108-08-15T09:00:00Z")
    r = client.post("/api/v1/appointments/", json=payload, headers=auth_header(**MANAGER))
    assert r.status_code == 400
    assert "before its end" in r.json()["error"]


def test_save_with_unknown_provider_is_bad_request(client):
    payload = dict(NEW_APPOINTMENT, providers=[{"provider_id": 31337}])
    r = client.post("/api/v1/appointments/", json=payload, headers=auth_header(**MANAGER))
    assert r.status_code == 400
    assert r.json()["error"] == "Provider 31337 does not exist"


def test_get_all_from_cutoff(client):
    r = client.get("/api/v1/appointments/all", params={"forDate": "2108-08-15T00:00:00"}, headers=auth_header(**READER))
    assert r.status_code == 200
    body = r.json()
    assert [a["id"] for a in body] == [2]
    providers = [p for p in body[0]["providers"] if p["provider_id"] == 2220]
    assert len(providers) == 1
    assert providers[0]["provider_name"] == "System Provider"


def test_roles_claim_grants_privileges(client):
    r = client.get("/api/v1/appointments/all", headers=auth_header(roles=["view-appointments"]))
    assert r.status_code == 200
    assert len(r.json()) == 3


def test_unknown_role_grants_nothing(client):
    r = client.get("/api/v1/appointments/all", headers=auth_header(roles=["janitor"]))
    assert r.status_code == 403


@pytest.mark.parametrize("method, path", [
    ("get", "/api/v1/appointments/all"),
    ("get", "/api/v1/appointments/range"),
    ("get", "/api/v1/appointments/futureAppointmentsForService/1"),
    ("get", "/api/v1/appointments/futureAppointmentsForServiceType/1"),
    ("get", "/api/v1/appointments/service/1"),
    ("get", "/api/v1/appointments/uuid"),
    ("post", "/api/v1/appointments/uuid/undo-status-change"),
])
def test_no_privilege_is_forbidden_everywhere(client, method, path):
    r = getattr(client, method)(path, headers=auth_header(**NOBODY))
    assert r.status_code == 403


def test_search(client):
    r = client.post("/api/v1/appointments/search", json={"provider_id": 2220}, headers=auth_header(**READER))
    assert r.status_code == 200
    assert [a["uuid"] for a in r.json()] == ["appt-uuid-2"]


def test_date_range(client):
    r = client.get(
        "/api/v1/appointments/range",
        params={"start": "2108-08-14T00:00:00", "end": "2108-08-15T00:00:00"},
        headers=auth_header(**READER),
    )
    assert [a["id"] for a in r.json()] == [1]


def test_appointments_for_service_with_status(client):
    r = client.get(
        "/api/v1/appointments/service/1",
        params=[("status", "Completed")],
        headers=auth_header(**READER),
    )
    assert [a["id"] for a in r.json()] == [3]


def test_future_appointments_for_unknown_service(client):
    r = client.get("/api/v1/appointments/futureAppointmentsForService/42", headers=auth_header(**READER))
    assert r.status_code == 404


def test_get_unknown_uuid_returns_null(client):
    r = client.get("/api/v1/appointments/uuid", headers=auth_header(**READER))
    assert r.status_code == 200
    assert r.json() is None


def test_status_change_and_undo(client):
    headers = auth_header(**MANAGER)
    r = client.post("/api/v1/appointments/appt-uuid-1/status-change", json={"to_status": "CheckedIn"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "CheckedIn"

    r = client.post("/api/v1/appointments/appt-uuid-1/undo-status-change", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "Scheduled"

    r = client.post("/api/v1/appointments/appt-uuid-1/undo-status-change", headers=headers)
    assert r.status_code == 409
    assert r.json()["error"] == "No status change actions to undo"


def test_status_change_requires_manage(client):
    r = client.post(
        "/api/v1/appointments/appt-uuid-1/status-change",
        json={"to_status": "Completed"},
        headers=auth_header(**READER),
    )
    assert r.status_code == 403


def test_invalid_transition_is_conflict(client):
    r = client.post(
        "/api/v1/appointments/appt-uuid-3/status-change",
        json={"to_status": "Scheduled"},
        headers=auth_header(**MANAGER),
    )
    assert r.status_code == 409


def test_status_change_on_unknown_uuid(client):
    r = client.post(
        "/api/v1/appointments/missing/status-change",
        json={"to_status": "Completed"},
        headers=auth_header(**MANAGER),
    )
    assert r.status_code == 404


def test_void(client):
    headers = auth_header(**MANAGER)
    r = client.post("/api/v1/appointments/appt-uuid-2/void", json={"reason": "patient request"}, headers=headers)
    assert r.status_code == 200
    r = client.get("/api/v1/appointments/appt-uuid-2", headers=headers)
    assert r.json() is None


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in r.headers
