from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.enum.order_status import PaymentStatus


@attrs.define
class PaymentEntity:
    id: UUID
    order_id: UUID
    amount: int
    currency: str
    status: PaymentStatus = PaymentStatus.PENDING
    checkout_session_id: Optional[str] = None
    external_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_pending(cls, *, order_id: UUID, amount: int, currency: str) -> 'PaymentEntity':
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            order_id=order_id,
            amount=amount,
            currency=currency.lower(),
            created_at=now,
            updated_at=now,
        )

    @property
    def is_captured(self) -> bool:
        """Money was taken; a partially refunded payment still counts"""
        return self.status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED) and bool(
            self.external_reference
        )

    def attach_checkout_session(self, session_id: str) -> 'PaymentEntity':
        return attrs.evolve(
            self, checkout_session_id=session_id, updated_at=datetime.now(timezone.utc)
        )

    def complete(
        self, *, external_reference: str, settled_amount: int, settled_currency: str
    ) -> 'PaymentEntity':
        if self.status != PaymentStatus.PENDING:
            raise DomainError(f'Cannot complete a payment that is {self.status}')
        return attrs.evolve(
            self,
            status=PaymentStatus.COMPLETED,
            external_reference=external_reference,
            amount=settled_amount,
            currency=settled_currency.lower(),
            updated_at=datetime.now(timezone.utc),
        )

    def fail(self) -> 'PaymentEntity':
        if self.status != PaymentStatus.PENDING:
            raise DomainError(f'Cannot fail a payment that is {self.status}')
        return attrs.evolve(
            self, status=PaymentStatus.FAILED, updated_at=datetime.now(timezone.utc)
        )

    def mark_refunded(self) -> 'PaymentEntity':
        return attrs.evolve(
            self, status=PaymentStatus.REFUNDED, updated_at=datetime.now(timezone.utc)
        )
