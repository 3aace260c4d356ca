from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_errors import (
    AlreadyCheckedInError,
    AlreadyScannedError,
    EventPassedError,
    NotTransferableError,
    TicketNotValidError,
)


@attrs.define
class TicketEntity:
    id: UUID
    order_id: UUID
    event_id: int
    tier_id: int
    holder_id: int
    price: int
    attendee_name: str = ''
    attendee_email: str = ''
    attendee_phone: Optional[str] = None
    status: TicketStatus = TicketStatus.PENDING
    credential: Optional[str] = attrs.field(default=None, repr=False)
    checked_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_pending(
        cls,
        *,
        order_id: UUID,
        event_id: int,
        tier_id: int,
        holder_id: int,
        price: int,
        attendee_name: str,
        attendee_email: str,
    ) -> 'TicketEntity':
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            order_id=order_id,
            event_id=event_id,
            tier_id=tier_id,
            holder_id=holder_id,
            price=price,
            attendee_name=attendee_name,
            attendee_email=attendee_email,
            created_at=now,
            updated_at=now,
        )

    def confirm(self, *, price: int, credential: str) -> 'TicketEntity':
        if self.status != TicketStatus.PENDING:
            raise DomainError(f'Cannot confirm a ticket that is {self.status}')
        return attrs.evolve(
            self,
            status=TicketStatus.CONFIRMED,
            price=price,
            credential=credential,
            updated_at=datetime.now(timezone.utc),
        )

    def with_attendee_defaults(self, *, email: str, name: str = '') -> 'TicketEntity':
        """Fill attendee fields left empty at checkout; never overwrite"""
        return attrs.evolve(
            self,
            attendee_name=self.attendee_name or name,
            attendee_email=self.attendee_email or email,
        )

    def mark_checked_in(self, checked_in_at: datetime) -> 'TicketEntity':
        return attrs.evolve(
            self,
            status=TicketStatus.CHECKED_IN,
            checked_in_at=checked_in_at,
            updated_at=checked_in_at,
        )

    def ensure_scannable(self) -> None:
        if self.checked_in_at is not None:
            raise AlreadyScannedError(checked_in_at=self.checked_in_at)
        if self.status == TicketStatus.CANCELLED:
            raise TicketNotValidError('Ticket has been cancelled', code='ticket_cancelled')
        if self.status == TicketStatus.REFUNDED:
            raise TicketNotValidError('Ticket has been refunded', code='ticket_refunded')
        if self.status != TicketStatus.CONFIRMED:
            raise TicketNotValidError('Ticket has not been issued', code='ticket_not_issued')

    def ensure_transferable(self, *, event_start_at: datetime, now: Optional[datetime] = None) -> None:
        if self.checked_in_at is not None or self.status == TicketStatus.CHECKED_IN:
            raise AlreadyCheckedInError()
        if self.status != TicketStatus.CONFIRMED:
            raise NotTransferableError(f'Cannot transfer a ticket that is {self.status}')
        if event_start_at <= (now or datetime.now(timezone.utc)):
            raise EventPassedError()

    def transfer_to(
        self,
        *,
        attendee_name: str,
        attendee_email: str,
        attendee_phone: Optional[str],
        credential: str,
    ) -> 'TicketEntity':
        """New attendee and a fresh credential; the old credential stops validating"""
        return attrs.evolve(
            self,
            attendee_name=attendee_name,
            attendee_email=attendee_email,
            attendee_phone=attendee_phone,
            credential=credential,
            updated_at=datetime.now(timezone.utc),
        )

    def mark_refunded(self) -> 'TicketEntity':
        return attrs.evolve(
            self, status=TicketStatus.REFUNDED, updated_at=datetime.now(timezone.utc)
        )

    def cancel(self) -> 'TicketEntity':
        return attrs.evolve(
            self, status=TicketStatus.CANCELLED, updated_at=datetime.now(timezone.utc)
        )
