from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from uuid import UUID

from src.service.ticketing.domain.entity.order_entity import OrderEntity


class IOrderRepo(ABC):
    @abstractmethod
    async def create(self, *, order: OrderEntity) -> OrderEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Optional[OrderEntity]:
        pass

    @abstractmethod
    async def get_by_id_for_update(self, *, order_id: UUID) -> Optional[OrderEntity]:
        """
        Load the order and lock its row until the transaction ends

        Serializes concurrent payment confirmations and refunds of one order.
        """
        pass

    @abstractmethod
    async def update(self, *, order: OrderEntity) -> OrderEntity:
        pass

    @abstractmethod
    async def list_by_buyer(self, *, buyer_id: int) -> List[OrderEntity]:
        pass

    @abstractmethod
    async def list_by_event(self, *, event_id: int) -> List[OrderEntity]:
        pass

    @abstractmethod
    async def sum_sales_by_events(self, *, event_ids: Sequence[int]) -> int:
        """Total charged on completed and refunded orders (refunds not deducted)"""
        pass
