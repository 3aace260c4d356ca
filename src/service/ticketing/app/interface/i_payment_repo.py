from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.ticketing.domain.entity.payment_entity import PaymentEntity


class IPaymentRepo(ABC):
    @abstractmethod
    async def create(self, *, payment: PaymentEntity) -> PaymentEntity:
        pass

    @abstractmethod
    async def get_by_order_id(self, *, order_id: UUID) -> Optional[PaymentEntity]:
        pass

    @abstractmethod
    async def get_by_external_reference(
        self, *, external_reference: str
    ) -> Optional[PaymentEntity]:
        """Idempotency lookup; external_reference is unique across payments"""
        pass

    @abstractmethod
    async def update(self, *, payment: PaymentEntity) -> PaymentEntity:
        pass
