from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID

import attrs

from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.value_object.price_quote import PriceQuote
from src.service.ticketing.domain.value_object.tier_capacity import TierCapacity


@attrs.frozen
class CheckoutResult:
    order: OrderEntity
    quote: PriceQuote
    session_id: str
    checkout_url: str


class ConfirmPaymentStatus(StrEnum):
    CONFIRMED = 'confirmed'
    ALREADY_PROCESSED = 'already_processed'


@attrs.frozen
class ConfirmPaymentResult:
    status: ConfirmPaymentStatus
    order: OrderEntity
    tickets: tuple[TicketEntity, ...]
    notification_sent: bool = False


@attrs.frozen
class CheckInResult:
    """
    valid=True: this scan admitted the ticket.
    already_scanned=True: an earlier scan admitted it at checked_in_at.
    """

    valid: bool
    already_scanned: bool
    ticket: TicketEntity
    checked_in_at: datetime


@attrs.frozen
class TransferResult:
    ticket: TicketEntity
    notification_sent: bool


@attrs.frozen
class RefundResult:
    refund: RefundEntity
    order: OrderEntity
    refunded_total: int
    refunded_ticket_ids: tuple[UUID, ...]
    notification_sent: bool


@attrs.frozen
class PromoValidationResult:
    promo_code: PromoCodeEntity
    remaining_uses: Optional[int]


@attrs.frozen
class TierDraft:
    """One tier as submitted by the organizer, before it has an id"""

    name: str
    base_price: int
    capacity: TierCapacity
    description: str = ''
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None


@attrs.frozen
class EventDetail:
    event: EventEntity
    tiers: tuple[TicketTierEntity, ...]


@attrs.frozen
class TicketView:
    ticket: TicketEntity
    tier_name: str
    event_title: str
    credential_uri: Optional[str]


@attrs.frozen
class EventPage:
    items: tuple[EventDetail, ...]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@attrs.frozen
class EventOrderView:
    order: OrderEntity
    ticket_count: int
