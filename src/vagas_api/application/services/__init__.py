from vagas_api.application.services.notification_emitter import NotificationEmitter
from vagas_api.application.services.spot_allocator import SpotAllocator

__all__ = ["NotificationEmitter", "SpotAllocator"]
