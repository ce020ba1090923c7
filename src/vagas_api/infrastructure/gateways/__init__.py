from vagas_api.infrastructure.gateways.webhook_notification_gateway import (
    WebhookNotificationGateway,
)

__all__ = ["WebhookNotificationGateway"]
