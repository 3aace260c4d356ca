from abc import ABC, abstractmethod
from typing import Sequence

from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


class ITicketNotifier(ABC):
    """
    Buyer/attendee notifications sent after a transaction has committed.

    Every method is best-effort: it returns False on failure and never raises.
    """

    @abstractmethod
    async def send_order_confirmation(
        self,
        *,
        to: str,
        order: OrderEntity,
        event: EventEntity,
        tickets: Sequence[TicketEntity],
        tier_names: dict[int, str],
    ) -> bool:
        pass

    @abstractmethod
    async def send_transfer_notice(
        self, *, ticket: TicketEntity, event: EventEntity, from_name: str
    ) -> bool:
        pass

    @abstractmethod
    async def send_refund_notice(
        self, *, to: str, order: OrderEntity, refund: RefundEntity, event: EventEntity
    ) -> bool:
        pass
