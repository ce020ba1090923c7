from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from vagas_api.api.app import create_app
from vagas_api.shared.config import ApplicationContainer, settings

SCHEDULER_TOKEN = "sched-secret"


@pytest.fixture
def api(store):
    app_settings = settings.model_copy(
        update={
            "scheduler_token": SCHEDULER_TOKEN,
            "notification_webhook_url": "",
            "cors_allowed_origins": "",
        }
    )
    container = ApplicationContainer(app_settings, uow_factory=store.unit_of_work)
    resolver = container.create_identity_resolver()

    def auth(user_id: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {resolver.issue(user_id)}"}

    with TestClient(create_app(container)) as client:
        yield client, auth


def _booking_payload(spot_number: str = "A12") -> dict:
    return {
        "facility_id": "fac-1",
        "spot_number": spot_number,
        "date": datetime.now(UTC).date().isoformat(),
        "start_time": "09:00",
        "end_time": "11:00",
    }


def _create(client, auth, user_id: str = "user-1", spot_number: str = "A12") -> dict:
    response = client.post("/api/v1/bookings", json=_booking_payload(spot_number), headers=auth(user_id))
    assert response.status_code == 201, response.text
    return response.json()


def test_full_lifecycle_over_http(api) -> None:
    client, auth = api
    booking = _create(client, auth)
    assert booking["status"] == "aguardando_confirmacao"
    assert booking["price"] == "20.00"

    pending = client.get("/api/v1/facilities/fac-1/bookings/pending", headers=auth("owner-1"))
    assert [item["id"] for item in pending.json()] == [booking["id"]]

    accepted = client.post(f"/api/v1/bookings/{booking['id']}/accept", headers=auth("owner-1"))
    assert accepted.json()["status"] == "reservada"

    owner_arrival = client.post(
        f"/api/v1/bookings/{booking['id']}/arrival",
        json={"confirmed_by": "owner"},
        headers=auth("owner-1"),
    )
    assert owner_arrival.json()["outcome"] == "awaiting_counterpart"
    user_arrival = client.post(
        f"/api/v1/bookings/{booking['id']}/arrival",
        json={"confirmed_by": "user"},
        headers=auth("user-1"),
    )
    assert user_arrival.json()["outcome"] == "advanced"
    assert user_arrival.json()["booking"]["status"] == "ocupada"

    stats = client.get("/api/v1/facilities/fac-1/spots/stats", headers=auth("owner-1")).json()
    assert stats == {"total": 3, "disponivel": 2, "reservada": 0, "ocupada": 1, "manutencao": 0}

    for party, user_id in (("user", "user-1"), ("owner", "owner-1")):
        response = client.post(
            f"/api/v1/bookings/{booking['id']}/departure",
            json={"confirmed_by": party},
            headers=auth(user_id),
        )
        assert response.status_code == 200
    final = client.get(f"/api/v1/bookings/{booking['id']}", headers=auth("user-1")).json()
    assert final["status"] == "concluida"
    assert final["completed_at"] is not None

    inbox = client.get("/api/v1/notifications", headers=auth("user-1")).json()
    assert {item["type"] for item in inbox} >= {
        "booking_accepted",
        "arrival_request",
        "booking_started",
        "booking_completed",
    }


def test_requests_without_valid_token_are_rejected(api) -> None:
    client, _ = api

    missing = client.post("/api/v1/bookings", json=_booking_payload())
    garbage = client.get("/api/v1/notifications", headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert missing.json()["code"] == "AUTHENTICATION_ERROR"
    assert garbage.status_code == 401


def test_taken_spot_returns_conflict(api) -> None:
    client, auth = api
    _create(client, auth, user_id="user-1")

    response = client.post("/api/v1/bookings", json=_booking_payload(), headers=auth("user-2"))

    assert response.status_code == 409
    assert response.json()["code"] == "SPOT_UNAVAILABLE"


def test_role_and_existence_checks(api) -> None:
    client, auth = api
    booking = _create(client, auth)

    not_owner = client.post(f"/api/v1/bookings/{booking['id']}/accept", headers=auth("user-1"))
    stranger = client.get(f"/api/v1/bookings/{booking['id']}", headers=auth("user-2"))
    missing = client.post("/api/v1/bookings/missing/accept", headers=auth("owner-1"))
    not_facility_owner = client.get("/api/v1/facilities/fac-1/bookings/pending", headers=auth("user-1"))

    assert not_owner.status_code == 403
    assert stranger.status_code == 403
    assert missing.status_code == 404
    assert not_facility_owner.status_code == 403


def test_invalid_transition_returns_conflict(api) -> None:
    client, auth = api
    booking = _create(client, auth)
    client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=auth("user-1"))

    response = client.post(f"/api/v1/bookings/{booking['id']}/accept", headers=auth("owner-1"))

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_invalid_payload_returns_validation_error(api) -> None:
    client, auth = api
    payload = _booking_payload()
    payload["end_time"] = "08:00"

    response = client.post("/api/v1/bookings", json=payload, headers=auth("user-1"))

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_internal_expiration_requires_scheduler_token(api, store) -> None:
    client, auth = api
    booking = _create(client, auth)
    store.bookings[booking["id"]].expires_at = datetime.now(UTC) - timedelta(minutes=1)

    unauthorized = client.post("/api/v1/internal/bookings/expire", headers={"X-Scheduler-Token": "wrong"})
    report = client.post("/api/v1/internal/bookings/expire", headers={"X-Scheduler-Token": SCHEDULER_TOKEN})

    assert unauthorized.status_code == 401
    assert report.status_code == 200
    assert report.json() == {"expired": 1, "failed": 0, "skipped": 0}
    assert store.booking(booking["id"]).status == "expirada"
    assert store.spot("fac-1", "A12").is_free


def test_spot_under_maintenance_cannot_be_booked(api) -> None:
    client, auth = api

    toggled = client.put(
        "/api/v1/facilities/fac-1/spots/B03/maintenance",
        json={"enabled": True},
        headers=auth("owner-1"),
    )
    response = client.post("/api/v1/bookings", json=_booking_payload("B03"), headers=auth("user-1"))
    not_owner = client.put(
        "/api/v1/facilities/fac-1/spots/B03/maintenance",
        json={"enabled": False},
        headers=auth("user-1"),
    )

    assert toggled.status_code == 200
    assert toggled.json()["status"] == "manutencao"
    assert response.status_code == 409
    assert not_owner.status_code == 403
