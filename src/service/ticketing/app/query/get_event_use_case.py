from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import EventDetail
from src.service.ticketing.domain.ticketing_errors import EventNotFoundError


class GetEventUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> EventDetail:
        """Event with its tiers; remaining capacity is derived from each tier"""
        Logger.base.info(f'🎫 [GET_EVENT] Loading event {event_id}')

        async with self.uow:
            event = await self.uow.events.get_by_id(event_id=event_id)
            if event is None:
                Logger.base.warning(f'⚠️ [GET_EVENT] Event {event_id} not found')
                raise EventNotFoundError()
            tiers = await self.uow.tiers.list_by_event(event_id=event_id)

        return EventDetail(event=event, tiers=tuple(tiers))
