from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.query.get_payout_summary_use_case import GetPayoutSummaryUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import require_organizer
from src.service.ticketing.driving_adapter.http_controller.schema.organizer_schema import (
    PayoutSummaryResponse,
)


router = APIRouter()


@router.get('/payouts', status_code=status.HTTP_200_OK)
@Logger.io
async def get_payout_summary(
    current_user: UserEntity = Depends(require_organizer),
    use_case: GetPayoutSummaryUseCase = Depends(GetPayoutSummaryUseCase.depends),
) -> PayoutSummaryResponse:
    summary = await use_case.get_summary(organizer_id=current_user.id or 0)
    return PayoutSummaryResponse.from_summary(summary)
