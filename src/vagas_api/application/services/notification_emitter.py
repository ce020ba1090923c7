from collections.abc import Callable
from datetime import UTC, datetime

from vagas_api.domain.entities import Booking, Facility, Notification
from vagas_api.domain.enums import NotificationType

_TEMPLATES: dict[NotificationType, tuple[str, str]] = {
    NotificationType.BOOKING_REQUEST: (
        "Nova solicitação de reserva",
        "Você recebeu uma nova solicitação para a vaga {spot_number} em {date}.",
    ),
    NotificationType.BOOKING_ACCEPTED: (
        "Reserva confirmada!",
        "Sua reserva foi aceita pelo estacionamento. "
        "Você pode visualizar a rota na página Explorar.",
    ),
    NotificationType.BOOKING_REJECTED: (
        "Reserva não aceita",
        "Infelizmente sua solicitação de reserva não foi aceita pelo estacionamento.",
    ),
    NotificationType.BOOKING_EXPIRED: (
        "Solicitação expirada",
        "Sua solicitação de reserva expirou sem resposta do estacionamento.",
    ),
    NotificationType.BOOKING_CANCELLED: (
        "Reserva cancelada",
        "A reserva da vaga {spot_number} em {date} foi cancelada.",
    ),
    NotificationType.ARRIVAL_REQUEST: (
        "Confirme sua chegada",
        "O estacionamento confirmou que você chegou. Por favor, confirme sua chegada.",
    ),
    NotificationType.BOOKING_STARTED: (
        "Chegada confirmada",
        "A chegada na vaga {spot_number} foi confirmada pelas duas partes.",
    ),
    NotificationType.DEPARTURE_CONFIRMATION: (
        "Confirme sua saída",
        "O estacionamento confirmou sua saída. Por favor, confirme.",
    ),
    NotificationType.BOOKING_COMPLETED: (
        "Reserva concluída",
        "A reserva foi finalizada com sucesso.",
    ),
}


class NotificationEmitter:
    """Build notification records for decisive booking transitions."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def booking_requested(self, booking: Booking, facility: Facility) -> list[Notification]:
        return [self._build(NotificationType.BOOKING_REQUEST, facility.owner_id, booking)]

    def booking_accepted(self, booking: Booking) -> list[Notification]:
        return [self._build(NotificationType.BOOKING_ACCEPTED, booking.requester_id, booking)]

    def booking_rejected(self, booking: Booking) -> list[Notification]:
        return [self._build(NotificationType.BOOKING_REJECTED, booking.requester_id, booking)]

    def booking_expired(self, booking: Booking) -> list[Notification]:
        return [self._build(NotificationType.BOOKING_EXPIRED, booking.requester_id, booking)]

    def booking_cancelled(
        self, booking: Booking, facility: Facility, actor_id: str
    ) -> list[Notification]:
        """Notify whichever party did not cancel."""
        recipient = facility.owner_id if actor_id == booking.requester_id else booking.requester_id
        return [self._build(NotificationType.BOOKING_CANCELLED, recipient, booking)]

    def arrival_requested(self, booking: Booking) -> list[Notification]:
        return [self._build(NotificationType.ARRIVAL_REQUEST, booking.requester_id, booking)]

    def booking_started(self, booking: Booking, facility: Facility) -> list[Notification]:
        return self._both(NotificationType.BOOKING_STARTED, booking, facility)

    def departure_requested(self, booking: Booking) -> list[Notification]:
        return [
            self._build(NotificationType.DEPARTURE_CONFIRMATION, booking.requester_id, booking)
        ]

    def booking_completed(self, booking: Booking, facility: Facility) -> list[Notification]:
        return self._both(NotificationType.BOOKING_COMPLETED, booking, facility)

    def _both(
        self, notification_type: NotificationType, booking: Booking, facility: Facility
    ) -> list[Notification]:
        recipients = [booking.requester_id]
        if facility.owner_id != booking.requester_id:
            recipients.append(facility.owner_id)
        return [self._build(notification_type, recipient, booking) for recipient in recipients]

    def _build(
        self, notification_type: NotificationType, recipient_id: str, booking: Booking
    ) -> Notification:
        title, message = _TEMPLATES[notification_type]
        return Notification(
            recipient_id=recipient_id,
            type=notification_type,
            title=title,
            message=message.format(
                spot_number=booking.spot_number,
                date=booking.date.strftime("%d/%m/%Y"),
            ),
            booking_id=booking.id,
            facility_id=booking.facility_id,
            created_at=self._clock(),
        )
