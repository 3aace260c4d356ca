from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.payout_status import PayoutStatus


@attrs.define
class PayoutEntity:
    """
    One transfer of earnings to an organizer's bank account

    Rows are recorded by the settlement process; this service only reads them.
    """

    organizer_id: int
    amount: int
    currency: str
    status: PayoutStatus = PayoutStatus.PENDING
    external_reference: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_outstanding(self) -> bool:
        return self.status in (PayoutStatus.PENDING, PayoutStatus.SCHEDULED)
