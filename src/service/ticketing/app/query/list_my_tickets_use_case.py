from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import TicketView
from src.service.ticketing.app.interface.i_credential_renderer import ICredentialRenderer
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


# Only these statuses carry a credential worth showing
SCANNABLE_STATUSES = (TicketStatus.CONFIRMED, TicketStatus.CHECKED_IN)


class ListMyTicketsUseCase:
    def __init__(
        self, *, uow: AbstractUnitOfWork, credential_renderer: ICredentialRenderer
    ) -> None:
        self.uow = uow
        self.credential_renderer = credential_renderer

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_read_unit_of_work),
        credential_renderer: ICredentialRenderer = Depends(
            Provide[Container.credential_renderer]
        ),
    ) -> Self:
        return cls(uow=uow, credential_renderer=credential_renderer)

    @Logger.io
    async def list_my_tickets(self, *, holder_id: int) -> List[TicketView]:
        async with self.uow:
            tickets = await self.uow.tickets.list_by_holder(holder_id=holder_id)

            events: dict[int, EventEntity] = {}
            tier_names: dict[int, str] = {}
            for event_id in {ticket.event_id for ticket in tickets}:
                event = await self.uow.events.get_by_id(event_id=event_id)
                if event is not None:
                    events[event_id] = event
                for tier in await self.uow.tiers.list_by_event(event_id=event_id):
                    if tier.id is not None:
                        tier_names[tier.id] = tier.name

        return [
            TicketView(
                ticket=ticket,
                tier_name=tier_names.get(ticket.tier_id, ''),
                event_title=events[ticket.event_id].title if ticket.event_id in events else '',
                credential_uri=(
                    self.credential_renderer.render(credential=ticket.credential)
                    if ticket.credential and ticket.status in SCANNABLE_STATUSES
                    else None
                ),
            )
            for ticket in tickets
        ]
