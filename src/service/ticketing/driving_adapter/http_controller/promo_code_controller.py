from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.query.validate_promo_code_use_case import ValidatePromoCodeUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import get_current_user
from src.service.ticketing.driving_adapter.http_controller.schema.promo_code_schema import (
    PromoCodeValidateRequest,
    PromoCodeValidationResponse,
)


router = APIRouter()


@router.post('/validate', status_code=status.HTTP_200_OK)
@Logger.io
async def validate_promo_code(
    request: PromoCodeValidateRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ValidatePromoCodeUseCase = Depends(ValidatePromoCodeUseCase.depends),
) -> PromoCodeValidationResponse:
    result = await use_case.validate(event_id=request.event_id, code=request.code)
    return PromoCodeValidationResponse(
        code=result.promo_code.code,
        discount_type=result.promo_code.discount_type,
        discount_value=result.promo_code.discount_value,
        remaining_uses=result.remaining_uses,
    )
