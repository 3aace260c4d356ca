from typing import Sequence

import attrs

from src.service.ticketing.domain.entity.payout_entity import PayoutEntity
from src.service.ticketing.domain.enum.payout_status import PayoutStatus


@attrs.frozen
class PayoutSummary:
    """
    Organizer balance in minor units

    total_earnings is what buyers paid on completed or refunded orders minus
    completed refunds. Failed payouts never count as paid or pending, so the
    amount goes back into available_balance.
    """

    gross_sales: int
    refunded: int
    total_paid: int
    total_pending: int
    payouts: tuple[PayoutEntity, ...] = ()

    @classmethod
    def from_ledger(
        cls, *, gross_sales: int, refunded: int, payouts: Sequence[PayoutEntity]
    ) -> 'PayoutSummary':
        return cls(
            gross_sales=gross_sales,
            refunded=refunded,
            total_paid=sum(p.amount for p in payouts if p.status == PayoutStatus.PAID),
            total_pending=sum(p.amount for p in payouts if p.is_outstanding),
            payouts=tuple(payouts),
        )

    @property
    def total_earnings(self) -> int:
        return self.gross_sales - self.refunded

    @property
    def available_balance(self) -> int:
        return self.total_earnings - self.total_paid - self.total_pending
