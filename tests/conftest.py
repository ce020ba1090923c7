import os
import re
import uuid
from datetime import UTC, datetime, time, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from vagas_api.application import CreateBookingRequest, CreateBookingUseCase
from vagas_api.domain.entities import Booking, Facility

# Ensure model metadata is registered before creating/dropping tables.
from vagas_api.infrastructure.db.models import (  # noqa: F401
    BookingModel,
    BookingStatusHistoryModel,
    FacilityModel,
    NotificationModel,
    SpotModel,
)
from vagas_api.infrastructure.repositories import InMemoryLifecycleStore

load_dotenv()

TABLES_TRUNCATE_ORDER = [
    "notifications",
    "booking_status_history",
    "vagas",
    "bookings",
    "estacionamentos",
]

FACILITY_ID = "fac-1"
OWNER_ID = "owner-1"


class MutableClock:
    """Deterministic clock injected into use cases."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2026, 10, 19, 8, 0, tzinfo=UTC))


@pytest.fixture
def store() -> InMemoryLifecycleStore:
    """In-memory store with one facility (owner-1, R$10/h) and spots A12, B03, C01."""
    lifecycle_store = InMemoryLifecycleStore()
    lifecycle_store.add_facility(
        Facility(
            id=FACILITY_ID,
            owner_id=OWNER_ID,
            name="Estacionamento Centro",
            hourly_rate=Decimal("10.00"),
        )
    )
    lifecycle_store.add_spots(FACILITY_ID, "A12", "B03", "C01")
    return lifecycle_store


def _load_mysql_test_urls() -> tuple[str, str]:
    raw_url = os.getenv("MYSQL_TEST_DATABASE_URL")
    if not raw_url:
        pytest.skip("MYSQL_TEST_DATABASE_URL is not set; skipping MySQL tests.")

    url = make_url(raw_url)
    if url.get_backend_name() != "mysql":
        pytest.fail("Test database must use MySQL.")
    if not (url.database and url.database.endswith("_test")):
        pytest.fail("MYSQL_TEST_DATABASE_URL database name must end with '_test'.")

    async_url = url.render_as_string(hide_password=False)
    sync_drivername = (
        "mysql+pymysql" if url.drivername == "mysql" else url.drivername.replace("aiomysql", "pymysql")
    )
    sync_url = url.set(drivername=sync_drivername).render_as_string(hide_password=False)
    return async_url, sync_url


def _admin_url(sync_url: str) -> tuple[str, str]:
    parsed_url = make_url(sync_url)
    database = parsed_url.database or ""
    if not re.fullmatch(r"[A-Za-z0-9_]+", database):
        pytest.fail("Test database name contains unsupported characters.")
    admin_url = URL.create(
        drivername=parsed_url.drivername,
        username=parsed_url.username,
        password=parsed_url.password,
        host=parsed_url.host,
        port=parsed_url.port,
        database=None,
        query=parsed_url.query,
    ).render_as_string(hide_password=False)
    return admin_url, database


def _ensure_test_database_exists(sync_url: str) -> None:
    admin_url, database = _admin_url(sync_url)
    engine = create_engine(admin_url, pool_pre_ping=True)
    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    f"CREATE DATABASE IF NOT EXISTS `{database}` "
                    "CHARACTER SET utf8mb4 COLLATE utf8mb4_0900_ai_ci"
                )
            )
    finally:
        engine.dispose()


def _drop_database(sync_url: str) -> None:
    admin_url, database = _admin_url(sync_url)
    engine = create_engine(admin_url, pool_pre_ping=True)
    try:
        with engine.begin() as conn:
            conn.execute(text(f"DROP DATABASE IF EXISTS `{database}`"))
    finally:
        engine.dispose()


@pytest.fixture(scope="session")
def mysql_test_urls() -> tuple[str, str]:
    base_async_url, base_sync_url = _load_mysql_test_urls()
    isolated_db = f"{make_url(base_sync_url).database}_{uuid.uuid4().hex[:8]}"[:64]

    async_url = make_url(base_async_url).set(database=isolated_db).render_as_string(hide_password=False)
    sync_url = make_url(base_sync_url).set(database=isolated_db).render_as_string(hide_password=False)

    _ensure_test_database_exists(sync_url)
    bootstrap_engine = create_engine(sync_url, pool_pre_ping=True)
    try:
        SQLModel.metadata.create_all(bootstrap_engine, checkfirst=False)
    finally:
        bootstrap_engine.dispose()

    try:
        yield async_url, sync_url
    finally:
        _drop_database(sync_url)


@pytest.fixture(scope="session")
def mysql_sync_engine(mysql_test_urls: tuple[str, str]):
    _, sync_url = mysql_test_urls
    engine = create_engine(sync_url, pool_pre_ping=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def reset_mysql_schema(mysql_sync_engine):
    with mysql_sync_engine.begin() as conn:
        conn.execute(text("SET FOREIGN_KEY_CHECKS = 0"))
        for table in TABLES_TRUNCATE_ORDER:
            conn.execute(text(f"TRUNCATE TABLE `{table}`"))
        conn.execute(text("SET FOREIGN_KEY_CHECKS = 1"))
    return mysql_sync_engine


@pytest_asyncio.fixture(scope="function")
async def mysql_async_session_factory(
    mysql_test_urls: tuple[str, str],
    reset_mysql_schema,
) -> async_sessionmaker[AsyncSession]:
    async_url, _ = mysql_test_urls
    engine = create_async_engine(async_url, poolclass=NullPool, pool_pre_ping=False)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def pending_booking(store: InMemoryLifecycleStore, clock: MutableClock) -> Booking:
    """Booking by user-1 on A12 for 09:00-11:00 today, awaiting owner-1."""
    use_case = CreateBookingUseCase(uow_factory=store.unit_of_work, clock=clock)
    return await use_case.execute(
        CreateBookingRequest(
            requester_id="user-1",
            facility_id=FACILITY_ID,
            spot_number="A12",
            booking_date=clock.now.date(),
            start_time=time(9, 0),
            end_time=time(11, 0),
        )
    )
