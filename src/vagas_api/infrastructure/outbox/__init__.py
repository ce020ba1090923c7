from vagas_api.infrastructure.outbox.notification_dispatcher import NotificationDispatcher

__all__ = ["NotificationDispatcher"]
