from typing import List, Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import EventOrderView
from src.service.ticketing.domain.ticketing_errors import EventNotFoundError


class ListEventOrdersUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_event_orders(self, *, event_id: int, organizer_id: int) -> List[EventOrderView]:
        """Every order of an event with its ticket count, newest first; organizer must own it"""
        async with self.uow:
            event = await self.uow.events.get_by_id(event_id=event_id)
            if event is None:
                raise EventNotFoundError()
            event.ensure_owned_by(organizer_id)

            orders = await self.uow.orders.list_by_event(event_id=event_id)
            counts = await self.uow.tickets.count_by_orders(
                order_ids=[order.id for order in orders]
            )

        return [
            EventOrderView(order=order, ticket_count=counts.get(order.id, 0)) for order in orders
        ]
