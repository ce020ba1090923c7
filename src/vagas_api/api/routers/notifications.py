from typing import Annotated

from fastapi import APIRouter, Depends, Query

from vagas_api.api.dependencies import CurrentUserId, get_list_notifications_use_case
from vagas_api.api.schemas import NotificationResponseDTO
from vagas_api.application import ListNotificationsUseCase

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=list[NotificationResponseDTO],
    summary="Notifications addressed to the caller, newest first",
)
async def list_notifications(
    user_id: CurrentUserId,
    use_case: Annotated[ListNotificationsUseCase, Depends(get_list_notifications_use_case)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[NotificationResponseDTO]:
    notifications = await use_case.execute(user_id, limit=limit)
    return [NotificationResponseDTO.from_entity(item) for item in notifications]
