from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_repo import IEventRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.driven_adapter.model.event_model import EventModel


class EventRepoImpl(IEventRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: EventModel) -> EventEntity:
        return EventEntity(
            id=model.id,
            organizer_id=model.organizer_id,
            title=model.title,
            description=model.description,
            venue=model.venue,
            address=model.address,
            city=model.city,
            category=model.category,
            start_at=model.start_at,
            end_at=model.end_at,
            timezone=model.timezone,
            status=EventStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create(self, *, event: EventEntity) -> EventEntity:
        model = EventModel(
            organizer_id=event.organizer_id,
            title=event.title,
            description=event.description,
            venue=event.venue,
            address=event.address,
            city=event.city,
            category=event.category,
            start_at=event.start_at,
            end_at=event.end_at,
            timezone=event.timezone,
            status=event.status.value,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        result = await self.session.execute(select(EventModel).where(EventModel.id == event_id))
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_by_organizer(self, *, organizer_id: int) -> List[EventEntity]:
        result = await self.session.execute(
            select(EventModel)
            .where(EventModel.organizer_id == organizer_id)
            .order_by(EventModel.start_at)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _contains(value: str) -> str:
        escaped = value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
        return f'%{escaped}%'

    @Logger.io
    async def search_published(
        self,
        *,
        search: str = '',
        city: str = '',
        category: str = '',
        limit: int,
        offset: int,
    ) -> tuple[List[EventEntity], int]:
        conditions = [EventModel.status == EventStatus.PUBLISHED.value]
        if search:
            pattern = self._contains(search)
            conditions.append(
                or_(
                    EventModel.title.ilike(pattern, escape='\\'),
                    EventModel.description.ilike(pattern, escape='\\'),
                )
            )
        if city:
            conditions.append(EventModel.city.ilike(self._contains(city), escape='\\'))
        if category:
            conditions.append(EventModel.category == category)

        total = await self.session.scalar(
            select(func.count()).select_from(EventModel).where(*conditions)
        )
        result = await self.session.execute(
            select(EventModel)
            .where(*conditions)
            .order_by(EventModel.start_at, EventModel.id)
            .limit(limit)
            .offset(offset)
        )
        events = [self._model_to_entity(model) for model in result.scalars().all()]
        return events, int(total or 0)
