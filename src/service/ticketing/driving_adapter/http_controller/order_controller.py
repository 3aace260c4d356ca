from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.refund_order_use_case import RefundOrderUseCase
from src.service.ticketing.app.query.list_my_orders_use_case import ListMyOrdersUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_organizer,
)
from src.service.ticketing.driving_adapter.http_controller.schema.order_schema import (
    OrderResponse,
    RefundRequest,
    RefundResponse,
)


router = APIRouter()


@router.get('/my', status_code=status.HTTP_200_OK)
@Logger.io
async def list_my_orders(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyOrdersUseCase = Depends(ListMyOrdersUseCase.depends),
) -> List[OrderResponse]:
    orders = await use_case.list_my_orders(buyer_id=current_user.id or 0)
    return [OrderResponse.from_entity(order) for order in orders]


@router.post('/{order_id}/refund', status_code=status.HTTP_200_OK)
@Logger.io
async def refund_order(
    order_id: UUID,
    request: RefundRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: RefundOrderUseCase = Depends(RefundOrderUseCase.depends),
) -> RefundResponse:
    result = await use_case.refund_order(
        order_id=order_id,
        organizer_id=current_user.id or 0,
        amount=request.amount,
        reason=request.reason,
        ticket_ids=request.ticket_ids,
    )
    return RefundResponse.from_result(result)
