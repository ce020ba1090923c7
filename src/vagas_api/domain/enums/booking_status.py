from enum import StrEnum


class BookingStatus(StrEnum):
    AGUARDANDO_CONFIRMACAO = "aguardando_confirmacao"
    RESERVADA = "reservada"
    OCUPADA = "ocupada"
    CONCLUIDA = "concluida"
    CANCELADA = "cancelada"
    REJEITADA = "rejeitada"
    EXPIRADA = "expirada"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_BOOKING_STATUSES


TERMINAL_BOOKING_STATUSES = frozenset(
    {
        BookingStatus.CONCLUIDA,
        BookingStatus.CANCELADA,
        BookingStatus.REJEITADA,
        BookingStatus.EXPIRADA,
    }
)

ACTIVE_BOOKING_STATUSES = frozenset(
    {
        BookingStatus.AGUARDANDO_CONFIRMACAO,
        BookingStatus.RESERVADA,
        BookingStatus.OCUPADA,
    }
)
