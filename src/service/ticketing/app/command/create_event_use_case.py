from datetime import datetime
from typing import Self, Sequence

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import EventDetail, TierDraft
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.enum.event_status import EventStatus


class CreateEventUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def create_event(
        self,
        *,
        organizer_id: int,
        title: str,
        venue: str,
        start_at: datetime,
        end_at: datetime,
        tiers: Sequence[TierDraft],
        description: str = '',
        address: str = '',
        city: str = '',
        category: str = '',
        timezone: str = 'UTC',
        status: EventStatus = EventStatus.PUBLISHED,
    ) -> EventDetail:
        """Event and its tiers are created in one transaction"""
        with self.tracer.start_as_current_span(
            'use_case.create_event',
            attributes={'organizer.id': organizer_id, 'event.tier_count': len(tiers)},
        ):
            if not tiers:
                raise DomainError('At least one ticket tier is required')

            event = EventEntity(
                title=title,
                organizer_id=organizer_id,
                venue=venue,
                start_at=start_at,
                end_at=end_at,
                description=description,
                address=address,
                city=city.strip(),
                category=category.strip().lower(),
                timezone=timezone,
                status=status,
            )

            async with self.uow:
                created_event = await self.uow.events.create(event=event)
                if created_event.id is None:
                    raise ValueError('Event ID should not be None after creation.')
                created_tiers = await self.uow.tiers.create_many(
                    tiers=[
                        TicketTierEntity.create(
                            event_id=created_event.id,
                            name=draft.name,
                            base_price=draft.base_price,
                            capacity=draft.capacity,
                            description=draft.description,
                            sale_start_at=draft.sale_start_at,
                            sale_end_at=draft.sale_end_at,
                        )
                        for draft in tiers
                    ]
                )
                await self.uow.commit()

            Logger.base.info(
                f'🎪 [CREATE-EVENT] Event {created_event.id} "{created_event.title}" '
                f'with {len(created_tiers)} tiers'
            )
            return EventDetail(event=created_event, tiers=tuple(created_tiers))
