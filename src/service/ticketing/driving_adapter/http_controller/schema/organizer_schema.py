from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.service.ticketing.domain.entity.payout_entity import PayoutEntity
from src.service.ticketing.domain.enum.payout_status import PayoutStatus
from src.service.ticketing.domain.value_object.payout_summary import PayoutSummary


class PayoutResponse(BaseModel):
    id: int
    amount: int
    currency: str
    status: PayoutStatus
    scheduled_at: Optional[datetime]
    paid_at: Optional[datetime]
    failure_reason: Optional[str]

    @classmethod
    def from_entity(cls, payout: PayoutEntity) -> 'PayoutResponse':
        return cls(
            id=payout.id or 0,
            amount=payout.amount,
            currency=payout.currency,
            status=payout.status,
            scheduled_at=payout.scheduled_at,
            paid_at=payout.paid_at,
            failure_reason=payout.failure_reason,
        )


class PayoutSummaryResponse(BaseModel):
    """Amounts in minor currency units"""

    gross_sales: int
    refunded: int
    total_earnings: int
    total_paid: int
    total_pending: int
    available_balance: int
    payouts: List[PayoutResponse]

    @classmethod
    def from_summary(cls, summary: PayoutSummary) -> 'PayoutSummaryResponse':
        return cls(
            gross_sales=summary.gross_sales,
            refunded=summary.refunded,
            total_earnings=summary.total_earnings,
            total_paid=summary.total_paid,
            total_pending=summary.total_pending,
            available_balance=summary.available_balance,
            payouts=[PayoutResponse.from_entity(payout) for payout in summary.payouts],
        )
