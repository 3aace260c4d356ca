from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity


class IPromoCodeRepo(ABC):
    @abstractmethod
    async def create(self, *, promo_code: PromoCodeEntity) -> PromoCodeEntity:
        pass

    @abstractmethod
    async def get_by_code(self, *, event_id: int, code: str) -> Optional[PromoCodeEntity]:
        """Lookup by the normalized (upper-case) code, unique per event"""
        pass

    @abstractmethod
    async def get_by_id_for_update(self, *, promo_code_id: int) -> Optional[PromoCodeEntity]:
        pass

    @abstractmethod
    async def increment_uses(self, *, promo_code_id: int) -> int:
        """
        Atomically add one use

        Returns:
            The new current_uses
        """
        pass

    @abstractmethod
    async def list_by_event(self, *, event_id: int) -> List[PromoCodeEntity]:
        pass
