from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.ticketing.domain.entity.event_entity import EventEntity


class IEventRepo(ABC):
    @abstractmethod
    async def create(self, *, event: EventEntity) -> EventEntity:
        """Insert the event and return it with its generated id"""
        pass

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def list_by_organizer(self, *, organizer_id: int) -> List[EventEntity]:
        pass

    @abstractmethod
    async def search_published(
        self,
        *,
        search: str = '',
        city: str = '',
        category: str = '',
        limit: int,
        offset: int,
    ) -> tuple[List[EventEntity], int]:
        """
        Published events ordered by start time

        Args:
            search: Case-insensitive substring of the title or description
            city: Case-insensitive substring of the city
            category: Exact category
            limit: Page size
            offset: Rows to skip

        Returns:
            The page and the total number of matching events
        """
        pass
