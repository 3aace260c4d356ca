from typing import List, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_tier_repo import ITicketTierRepo
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.value_object.tier_capacity import CapacityMode, TierCapacity
from src.service.ticketing.driven_adapter.model.ticket_tier_model import TicketTierModel


class TicketTierRepoImpl(ITicketTierRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: TicketTierModel) -> TicketTierEntity:
        return TicketTierEntity(
            id=model.id,
            event_id=model.event_id,
            name=model.name,
            description=model.description,
            base_price=model.base_price,
            capacity=TierCapacity(
                mode=CapacityMode(model.capacity_mode), total=model.total_quantity
            ),
            sold_quantity=model.sold_quantity,
            sale_start_at=model.sale_start_at,
            sale_end_at=model.sale_end_at,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create_many(self, *, tiers: Sequence[TicketTierEntity]) -> List[TicketTierEntity]:
        models = [
            TicketTierModel(
                event_id=tier.event_id,
                name=tier.name,
                description=tier.description,
                base_price=tier.base_price,
                capacity_mode=tier.capacity.mode.value,
                total_quantity=tier.capacity.total,
                sold_quantity=tier.sold_quantity,
                sale_start_at=tier.sale_start_at,
                sale_end_at=tier.sale_end_at,
                is_active=tier.is_active,
            )
            for tier in tiers
        ]
        self.session.add_all(models)
        await self.session.flush()
        for model in models:
            await self.session.refresh(model)
        return [self._model_to_entity(model) for model in models]

    @Logger.io
    async def list_by_event(self, *, event_id: int) -> List[TicketTierEntity]:
        result = await self.session.execute(
            select(TicketTierModel)
            .where(TicketTierModel.event_id == event_id)
            .order_by(TicketTierModel.id)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_by_events(self, *, event_ids: Sequence[int]) -> List[TicketTierEntity]:
        if not event_ids:
            return []
        result = await self.session.execute(
            select(TicketTierModel)
            .where(TicketTierModel.event_id.in_(list(event_ids)))
            .order_by(TicketTierModel.event_id, TicketTierModel.id)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_by_ids_for_update(self, *, tier_ids: Sequence[int]) -> List[TicketTierEntity]:
        if not tier_ids:
            return []
        result = await self.session.execute(
            select(TicketTierModel)
            .where(TicketTierModel.id.in_(sorted(set(tier_ids))))
            .order_by(TicketTierModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def increment_sold_quantity(self, *, tier_id: int, quantity: int) -> int:
        result = await self.session.execute(
            update(TicketTierModel)
            .where(TicketTierModel.id == tier_id)
            .values(
                sold_quantity=TicketTierModel.sold_quantity + quantity,
                updated_at=func.now(),
            )
            .returning(TicketTierModel.sold_quantity)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()
