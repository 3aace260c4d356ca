from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.enum.order_status import RefundStatus


DEFAULT_REFUND_REASON = 'Refund requested by organizer'


@attrs.define
class RefundEntity:
    """
    Audit record of one reversal

    A refund is reserved as PENDING before the processor is called, so its
    amount already counts against what is left on the order, then settles
    to COMPLETED or FAILED. Settled rows never change again.
    """

    id: UUID
    order_id: UUID
    amount: int
    reason: str
    processed_by: int
    status: RefundStatus = RefundStatus.PENDING
    external_reference: Optional[str] = None
    processed_at: Optional[datetime] = None

    @classmethod
    def reserve(
        cls,
        *,
        order_id: UUID,
        amount: int,
        reason: Optional[str],
        processed_by: int,
    ) -> 'RefundEntity':
        if amount <= 0:
            raise DomainError('Refund amount must be positive')
        return cls(
            id=uuid7(),
            order_id=order_id,
            amount=amount,
            reason=(reason or '').strip() or DEFAULT_REFUND_REASON,
            processed_by=processed_by,
            status=RefundStatus.PENDING,
        )

    @property
    def is_settled(self) -> bool:
        return self.status in (RefundStatus.COMPLETED, RefundStatus.FAILED)

    def complete(self, *, external_reference: str) -> 'RefundEntity':
        if self.is_settled:
            raise DomainError(f'Refund {self.id} is already {self.status}')
        return attrs.evolve(
            self,
            status=RefundStatus.COMPLETED,
            external_reference=external_reference,
            processed_at=datetime.now(timezone.utc),
        )

    def fail(self) -> 'RefundEntity':
        if self.is_settled:
            raise DomainError(f'Refund {self.id} is already {self.status}')
        return attrs.evolve(
            self, status=RefundStatus.FAILED, processed_at=datetime.now(timezone.utc)
        )
