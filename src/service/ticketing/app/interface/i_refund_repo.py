from abc import ABC, abstractmethod
from typing import Sequence
from uuid import UUID

from src.service.ticketing.domain.entity.refund_entity import RefundEntity


class IRefundRepo(ABC):
    @abstractmethod
    async def create(self, *, refund: RefundEntity) -> RefundEntity:
        pass

    @abstractmethod
    async def update(self, *, refund: RefundEntity) -> RefundEntity:
        """Persist a settlement (status, external reference, processed_at)"""
        pass

    @abstractmethod
    async def sum_completed_by_order(self, *, order_id: UUID) -> int:
        """Total already refunded for the order (0 when none)"""
        pass

    @abstractmethod
    async def sum_reserved_by_order(self, *, order_id: UUID) -> int:
        """Completed plus pending refunds; what is no longer refundable"""
        pass

    @abstractmethod
    async def sum_completed_by_events(self, *, event_ids: Sequence[int]) -> int:
        pass
