from vagas_api.infrastructure.repositories.in_memory_unit_of_work import (
    InMemoryLifecycleStore,
    InMemoryUnitOfWork,
    RecordedStatusChange,
)
from vagas_api.infrastructure.repositories.sql_unit_of_work import (
    SQLBookingRepository,
    SQLFacilityReader,
    SQLLifecycleUnitOfWork,
    SQLNotificationOutbox,
    SQLSpotRepository,
    notification_from_model,
)

__all__ = [
    "InMemoryLifecycleStore",
    "InMemoryUnitOfWork",
    "RecordedStatusChange",
    "SQLBookingRepository",
    "SQLFacilityReader",
    "SQLLifecycleUnitOfWork",
    "SQLNotificationOutbox",
    "SQLSpotRepository",
    "notification_from_model",
]
