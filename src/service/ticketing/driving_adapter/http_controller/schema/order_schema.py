from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.ticketing.app.dto.ticketing_result import EventOrderView, RefundResult
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.enum.order_status import OrderStatus, RefundStatus


class OrderResponse(BaseModel):
    id: UUID
    event_id: int
    status: OrderStatus
    subtotal_amount: int
    discount_amount: int
    total_amount: int
    currency: str
    created_at: Optional[datetime]
    completed_at: Optional[datetime]

    @classmethod
    def from_entity(cls, order: OrderEntity) -> 'OrderResponse':
        return cls(
            id=order.id,
            event_id=order.event_id,
            status=order.status,
            subtotal_amount=order.subtotal_amount,
            discount_amount=order.discount_amount,
            total_amount=order.total_amount,
            currency=order.currency,
            created_at=order.created_at,
            completed_at=order.completed_at,
        )


class EventOrderResponse(OrderResponse):
    buyer_email: str
    ticket_count: int

    @classmethod
    def from_view(cls, view: EventOrderView) -> 'EventOrderResponse':
        return cls(
            **OrderResponse.from_entity(view.order).model_dump(),
            buyer_email=view.order.buyer_email,
            ticket_count=view.ticket_count,
        )


class RefundRequest(BaseModel):
    amount: Optional[int] = Field(
        default=None, ge=1, description='Minor units; defaults to the remaining refundable amount'
    )
    reason: Optional[str] = Field(default=None, max_length=500)
    ticket_ids: Optional[List[UUID]] = Field(
        default=None, description='Tickets to invalidate; omit for every ticket in the order'
    )


class RefundResponse(BaseModel):
    refund_id: UUID
    order_id: UUID
    amount: int
    status: RefundStatus
    reason: str
    order_status: OrderStatus
    refunded_total: int
    refunded_ticket_ids: List[UUID]
    notification_sent: bool

    @classmethod
    def from_result(cls, result: RefundResult) -> 'RefundResponse':
        return cls(
            refund_id=result.refund.id,
            order_id=result.order.id,
            amount=result.refund.amount,
            status=result.refund.status,
            reason=result.refund.reason,
            order_status=result.order.status,
            refunded_total=result.refunded_total,
            refunded_ticket_ids=list(result.refunded_ticket_ids),
            notification_sent=result.notification_sent,
        )
