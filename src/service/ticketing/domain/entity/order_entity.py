from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.domain.ticketing_errors import RefundNotAllowedError
from src.service.ticketing.domain.value_object.price_quote import PriceQuote


@attrs.define
class OrderEntity:
    id: UUID
    buyer_id: int
    event_id: int
    subtotal_amount: int
    discount_amount: int
    total_amount: int
    currency: str
    buyer_email: str = ''
    promo_code_id: Optional[int] = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def create_pending(
        cls, *, buyer_id: int, event_id: int, buyer_email: str, quote: PriceQuote, currency: str
    ) -> 'OrderEntity':
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            buyer_id=buyer_id,
            event_id=event_id,
            buyer_email=buyer_email,
            subtotal_amount=quote.subtotal,
            discount_amount=quote.discount,
            total_amount=quote.total,
            currency=currency.lower(),
            promo_code_id=quote.promo_code_id,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def complete(self, *, settled_amount: int, settled_currency: str) -> 'OrderEntity':
        """The processor's settled amount is authoritative over the quoted total"""
        if self.status != OrderStatus.PENDING:
            raise DomainError(f'Cannot complete an order that is {self.status}')
        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=OrderStatus.COMPLETED,
            total_amount=settled_amount,
            currency=settled_currency.lower(),
            completed_at=now,
            updated_at=now,
        )

    def cancel(self) -> 'OrderEntity':
        if self.status != OrderStatus.PENDING:
            raise DomainError(f'Cannot cancel an order that is {self.status}')
        return attrs.evolve(
            self, status=OrderStatus.CANCELLED, updated_at=datetime.now(timezone.utc)
        )

    def ensure_refundable(self) -> None:
        if self.status == OrderStatus.REFUNDED:
            raise RefundNotAllowedError('Order has already been refunded')
        if self.status == OrderStatus.CANCELLED:
            raise RefundNotAllowedError('Order has been cancelled')
        if self.status != OrderStatus.COMPLETED:
            raise RefundNotAllowedError('Only completed orders can be refunded')

    def apply_refund(self, *, refunded_total: int) -> 'OrderEntity':
        """A partial refund leaves the order completed; the full amount closes it"""
        if refunded_total < self.total_amount:
            return attrs.evolve(self, updated_at=datetime.now(timezone.utc))
        return attrs.evolve(
            self, status=OrderStatus.REFUNDED, updated_at=datetime.now(timezone.utc)
        )
