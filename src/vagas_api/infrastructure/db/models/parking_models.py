from datetime import UTC, date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SAEnum
from sqlmodel import Column, Field, SQLModel

from vagas_api.domain.enums import BookingStatus, NotificationType, SpotStatus


class FacilityModel(SQLModel, table=True):
    __tablename__ = "estacionamentos"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    owner_id: str = Field(sa_column=Column(String(36), nullable=False, index=True))
    name: str = Field(sa_column=Column(String(120), nullable=False))
    hourly_rate: Decimal | None = Field(default=None, sa_column=Column(Numeric(10, 2)))
    reservation_timeout_minutes: int | None = Field(
        default=None, sa_column=Column(Integer, nullable=True)
    )
    opening_hours: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    active: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


class BookingModel(SQLModel, table=True):
    __tablename__ = "bookings"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    requester_id: str = Field(sa_column=Column(String(36), nullable=False, index=True))
    facility_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("estacionamentos.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    spot_number: str = Field(sa_column=Column(String(20), nullable=False))
    booking_date: date = Field(sa_column=Column("date", Date, nullable=False))
    start_time: time = Field(sa_column=Column(Time, nullable=False))
    end_time: time = Field(sa_column=Column(Time, nullable=False))
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(
                BookingStatus,
                name="booking_status",
                native_enum=False,
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
            index=True,
        )
    )
    version: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )
    expires_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), index=True)
    )
    accepted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    rejected_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    arrival_confirmed_by_owner_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    arrival_confirmed_by_user_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    departure_confirmed_by_owner_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    departure_confirmed_by_user_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    completed_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    cancelled_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    cancelled_by: str | None = Field(default=None, sa_column=Column(String(36), nullable=True))
    expired_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))


class SpotModel(SQLModel, table=True):
    __tablename__ = "vagas"
    __table_args__ = (UniqueConstraint("facility_id", "spot_number", name="uq_vagas_facility_spot"),)

    id: int | None = Field(default=None, primary_key=True)
    facility_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("estacionamentos.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    spot_number: str = Field(sa_column=Column(String(20), nullable=False))
    status: SpotStatus = Field(
        sa_column=Column(
            SAEnum(
                SpotStatus,
                name="spot_status",
                native_enum=False,
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
            default=SpotStatus.DISPONIVEL,
        )
    )
    booking_id: str | None = Field(
        default=None,
        sa_column=Column(
            String(36),
            ForeignKey("bookings.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    user_id: str | None = Field(default=None, sa_column=Column(String(36), nullable=True))


class BookingStatusHistoryModel(SQLModel, table=True):
    __tablename__ = "booking_status_history"

    id: int | None = Field(default=None, primary_key=True)
    booking_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    from_status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(
                BookingStatus,
                name="booking_status",
                native_enum=False,
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
        )
    )
    to_status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(
                BookingStatus,
                name="booking_status",
                native_enum=False,
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
        )
    )
    changed_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


class NotificationModel(SQLModel, table=True):
    __tablename__ = "notifications"

    id: str = Field(sa_column=Column(String(36), primary_key=True))
    recipient_id: str = Field(sa_column=Column(String(36), nullable=False, index=True))
    type: NotificationType = Field(
        sa_column=Column(
            SAEnum(
                NotificationType,
                name="notification_type",
                native_enum=False,
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
        )
    )
    title: str = Field(sa_column=Column(String(120), nullable=False))
    message: str = Field(sa_column=Column(Text, nullable=False))
    booking_id: str | None = Field(default=None, sa_column=Column(String(36), index=True))
    facility_id: str | None = Field(default=None, sa_column=Column(String(36)))
    delivery_status: str = Field(
        default="PENDING", sa_column=Column(String(20), nullable=False, index=True)
    )
    attempts: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    last_error: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    delivered_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            index=True,
        ),
    )
