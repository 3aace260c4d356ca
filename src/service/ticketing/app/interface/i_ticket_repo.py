from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


class ITicketRepo(ABC):
    @abstractmethod
    async def create_many(self, *, tickets: Sequence[TicketEntity]) -> List[TicketEntity]:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        pass

    @abstractmethod
    async def get_by_id_for_update(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        pass

    @abstractmethod
    async def list_by_order(self, *, order_id: UUID) -> List[TicketEntity]:
        pass

    @abstractmethod
    async def list_by_order_for_update(self, *, order_id: UUID) -> List[TicketEntity]:
        """Lock the order's ticket rows so a concurrent check-in waits for this write"""
        pass

    @abstractmethod
    async def list_by_holder(self, *, holder_id: int) -> List[TicketEntity]:
        pass

    @abstractmethod
    async def update(self, *, ticket: TicketEntity) -> TicketEntity:
        pass

    @abstractmethod
    async def update_many(self, *, tickets: Sequence[TicketEntity]) -> None:
        pass

    @abstractmethod
    async def check_in_if_not_scanned(
        self, *, ticket_id: UUID, credential: str, checked_in_at: datetime
    ) -> Optional[datetime]:
        """
        Compare-and-set check-in

        Sets status=checked_in and checked_in_at only when the ticket is still
        confirmed, not yet scanned, and still bound to `credential`. Two
        concurrent scans cannot both succeed.

        Args:
            ticket_id: Ticket to check in
            credential: The credential that was scanned
            checked_in_at: Timestamp to record

        Returns:
            The stored checked_in_at when this call won, None otherwise
        """
        pass

    @abstractmethod
    async def count_by_orders(self, *, order_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Tickets per order; orders without tickets are absent"""
        pass
