from abc import ABC, abstractmethod
from typing import List, Sequence

from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity


class ITicketTierRepo(ABC):
    @abstractmethod
    async def create_many(self, *, tiers: Sequence[TicketTierEntity]) -> List[TicketTierEntity]:
        pass

    @abstractmethod
    async def list_by_event(self, *, event_id: int) -> List[TicketTierEntity]:
        pass

    @abstractmethod
    async def list_by_ids_for_update(self, *, tier_ids: Sequence[int]) -> List[TicketTierEntity]:
        """
        Load tiers and hold a row lock on each until the transaction ends

        Rows are locked in ascending id order so two transactions touching the
        same tiers cannot deadlock.

        Args:
            tier_ids: Tier IDs to lock

        Returns:
            Locked tiers (missing ids are simply absent)
        """
        pass

    @abstractmethod
    async def increment_sold_quantity(self, *, tier_id: int, quantity: int) -> int:
        """
        Atomically add `quantity` to sold_quantity

        Returns:
            The new sold_quantity
        """
        pass

    @abstractmethod
    async def list_by_events(self, *, event_ids: Sequence[int]) -> List[TicketTierEntity]:
        pass
