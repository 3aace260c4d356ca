from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.ticketing.app.dto.ticketing_result import CheckoutResult
from src.service.ticketing.domain.value_object.price_quote import TicketRequest


class CheckoutItemRequest(BaseModel):
    tier_id: int
    quantity: int = Field(..., ge=1)


class CheckoutCreateRequest(BaseModel):
    event_id: int
    items: List[CheckoutItemRequest] = Field(..., min_length=1)
    promo_code: Optional[str] = Field(default=None, max_length=50)

    class Config:
        json_schema_extra = {
            'example': {
                'event_id': 1,
                'items': [{'tier_id': 1, 'quantity': 2}],
                'promo_code': 'EARLYBIRD',
            }
        }

    def to_ticket_requests(self) -> list[TicketRequest]:
        return [TicketRequest(tier_id=item.tier_id, quantity=item.quantity) for item in self.items]


class LineItemResponse(BaseModel):
    tier_id: int
    tier_name: str
    unit_price: int
    quantity: int
    line_total: int


class CheckoutResponse(BaseModel):
    order_id: UUID
    session_id: str
    checkout_url: str
    currency: str
    line_items: List[LineItemResponse]
    subtotal: int
    discount: int
    total: int
    promo_code: Optional[str]

    @classmethod
    def from_result(cls, result: CheckoutResult) -> 'CheckoutResponse':
        quote = result.quote
        return cls(
            order_id=result.order.id,
            session_id=result.session_id,
            checkout_url=result.checkout_url,
            currency=result.order.currency,
            line_items=[
                LineItemResponse(
                    tier_id=item.tier_id,
                    tier_name=item.tier_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    line_total=item.line_total,
                )
                for item in quote.line_items
            ],
            subtotal=quote.subtotal,
            discount=quote.discount,
            total=quote.total,
            promo_code=quote.promo_code,
        )


class CheckoutConfirmRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class WebhookAck(BaseModel):
    received: bool = True
    status: str
