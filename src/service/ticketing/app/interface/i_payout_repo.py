from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.payout_entity import PayoutEntity


class IPayoutRepo(ABC):
    @abstractmethod
    async def list_by_organizer(self, *, organizer_id: int) -> List[PayoutEntity]:
        """Newest first"""
        pass
