from collections import defaultdict
from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import EventDetail, EventPage
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity


MAX_PAGE_SIZE = 50


class ListEventsUseCase:
    """Public catalogue: published events only, soonest first"""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_events(
        self,
        *,
        search: str = '',
        city: str = '',
        category: str = '',
        page: int = 1,
        limit: int = 12,
    ) -> EventPage:
        if page < 1:
            raise DomainError('page must be at least 1')
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise DomainError(f'limit must be between 1 and {MAX_PAGE_SIZE}')

        async with self.uow:
            events, total = await self.uow.events.search_published(
                search=search.strip(),
                city=city.strip(),
                category=category.strip().lower(),
                limit=limit,
                offset=(page - 1) * limit,
            )
            tiers = await self.uow.tiers.list_by_events(
                event_ids=[event.id for event in events if event.id is not None]
            )

        tiers_by_event: dict[int, list[TicketTierEntity]] = defaultdict(list)
        for tier in tiers:
            if tier.is_active:
                tiers_by_event[tier.event_id].append(tier)

        return EventPage(
            items=tuple(
                EventDetail(event=event, tiers=tuple(tiers_by_event[event.id or 0]))
                for event in events
            ),
            total=total,
            page=page,
            limit=limit,
        )
