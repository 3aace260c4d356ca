from typing import List, Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity
from src.service.ticketing.domain.ticketing_errors import EventNotFoundError


class ListPromoCodesUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_promo_codes(self, *, event_id: int, organizer_id: int) -> List[PromoCodeEntity]:
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id=event_id)
            if event is None:
                raise EventNotFoundError()
            event.ensure_owned_by(organizer_id)
            return await self.uow.promo_codes.list_by_event(event_id=event_id)
