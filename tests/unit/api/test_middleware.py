import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from vagas_api.api.middleware import ErrorHandlerMiddleware, RateLimiterMiddleware
from vagas_api.domain.errors import (
    ActiveBookingExistsError,
    AuthenticationError,
    ConcurrentUpdateError,
    InvalidTransitionError,
    NotFoundError,
    SpotUnavailableError,
    UnauthorizedError,
)


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)

    @app.get("/boom")
    async def boom() -> dict[str, str]:
        raise exc

    return app


@pytest.mark.parametrize(
    ("exc", "status_code", "code"),
    [
        (AuthenticationError("Missing bearer token"), 401, "AUTHENTICATION_ERROR"),
        (UnauthorizedError("User user-2 is not a party"), 403, "UNAUTHORIZED"),
        (NotFoundError("Booking b-1 not found"), 404, "NOT_FOUND"),
        (InvalidTransitionError("Invalid transition"), 409, "INVALID_TRANSITION"),
        (SpotUnavailableError("Spot A12 at facility fac-1 is reservada"), 409, "SPOT_UNAVAILABLE"),
        (ActiveBookingExistsError("already active"), 409, "ACTIVE_BOOKING_EXISTS"),
        (ValueError("Facility fac-1 has no hourly rate configured"), 400, "BUSINESS_LOGIC_ERROR"),
        (ConcurrentUpdateError("lost race"), 503, "CONTENTION"),
        (OperationalError("SELECT 1", {}, Exception("gone away")), 500, "DATABASE_ERROR"),
        (RuntimeError("unexpected"), 500, "INTERNAL_ERROR"),
    ],
)
def test_error_handler_maps_exceptions_to_error_payload(exc, status_code, code) -> None:
    client = TestClient(_app_raising(exc))

    response = client.get("/boom")

    assert response.status_code == status_code
    body = response.json()
    assert body["code"] == code
    assert set(body) == {"error", "message", "request_id", "code"}


def test_domain_error_message_reaches_caller_verbatim() -> None:
    client = TestClient(_app_raising(SpotUnavailableError("Spot A12 at facility fac-1 is ocupada")))

    response = client.get("/boom")

    assert response.json()["message"] == "Spot A12 at facility fac-1 is ocupada"


def test_internal_error_message_is_generic() -> None:
    client = TestClient(_app_raising(RuntimeError("password=hunter2 leaked")))

    response = client.get("/boom")

    assert "hunter2" not in response.text


def test_rate_limiter_limits_booking_creation_per_ip() -> None:
    app = FastAPI()
    app.add_middleware(
        RateLimiterMiddleware,
        default_limit_per_minute=20,
        bookings_limit_per_minute=2,
    )

    @app.post("/api/v1/bookings")
    async def create_booking() -> dict[str, str]:
        return {"status": "created"}

    @app.get("/api/v1/notifications")
    async def notifications() -> list[dict]:
        return []

    client = TestClient(app)
    first = client.post("/api/v1/bookings")
    second = client.post("/api/v1/bookings")
    third = client.post("/api/v1/bookings")
    other_endpoint = client.get("/api/v1/notifications")

    assert first.status_code == 200
    assert second.status_code == 200
    assert third.status_code == 429
    assert third.json()["code"] == "RATE_LIMIT_EXCEEDED"
    assert int(third.headers["retry-after"]) >= 1
    assert other_endpoint.status_code == 200


def test_rate_limiter_window_slides() -> None:
    now = [1000.0]
    app = FastAPI()
    app.add_middleware(
        RateLimiterMiddleware,
        default_limit_per_minute=1,
        bookings_limit_per_minute=1,
        time_provider=lambda: now[0],
    )

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    client = TestClient(app)
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 429

    now[0] += 61
    assert client.get("/ping").status_code == 200
