from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.ticketing.app.command.create_checkout_use_case import CreateCheckoutUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import require_buyer
from src.service.ticketing.driving_adapter.http_controller.schema.checkout_schema import (
    CheckoutConfirmRequest,
    CheckoutCreateRequest,
    CheckoutResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.order_schema import (
    OrderResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_checkout(
    request: CheckoutCreateRequest,
    current_user: UserEntity = Depends(require_buyer),
    use_case: CreateCheckoutUseCase = Depends(CreateCheckoutUseCase.depends),
) -> CheckoutResponse:
    result = await use_case.create_checkout(
        buyer_id=current_user.id or 0,
        buyer_email=current_user.email,
        buyer_name=current_user.name,
        event_id=request.event_id,
        items=request.to_ticket_requests(),
        promo_code=request.promo_code,
    )
    return CheckoutResponse.from_result(result)


@router.post('/confirm', status_code=status.HTTP_200_OK)
@Logger.io
async def confirm_checkout(
    request: CheckoutConfirmRequest,
    current_user: UserEntity = Depends(require_buyer),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> OrderResponse:
    """Buyer returned from the processor; safe to repeat and to race the webhook"""
    result = await use_case.confirm_checkout_session(session_id=request.session_id)
    return OrderResponse.from_entity(result.order)
