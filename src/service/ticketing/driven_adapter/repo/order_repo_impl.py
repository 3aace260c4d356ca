from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_order_repo import IOrderRepo
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.driven_adapter.model.order_model import OrderModel


class OrderRepoImpl(IOrderRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: OrderModel) -> OrderEntity:
        return OrderEntity(
            id=model.id,
            buyer_id=model.buyer_id,
            event_id=model.event_id,
            promo_code_id=model.promo_code_id,
            status=OrderStatus(model.status),
            subtotal_amount=model.subtotal_amount,
            discount_amount=model.discount_amount,
            total_amount=model.total_amount,
            currency=model.currency,
            buyer_email=model.buyer_email,
            created_at=model.created_at,
            updated_at=model.updated_at,
            completed_at=model.completed_at,
        )

    @Logger.io
    async def create(self, *, order: OrderEntity) -> OrderEntity:
        model = OrderModel(
            id=order.id,
            buyer_id=order.buyer_id,
            event_id=order.event_id,
            promo_code_id=order.promo_code_id,
            status=order.status.value,
            subtotal_amount=order.subtotal_amount,
            discount_amount=order.discount_amount,
            total_amount=order.total_amount,
            currency=order.currency,
            buyer_email=order.buyer_email,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_id(self, *, order_id: UUID) -> Optional[OrderEntity]:
        result = await self.session.execute(select(OrderModel).where(OrderModel.id == order_id))
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_id_for_update(self, *, order_id: UUID) -> Optional[OrderEntity]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def update(self, *, order: OrderEntity) -> OrderEntity:
        await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == order.id)
            .values(
                status=order.status.value,
                total_amount=order.total_amount,
                currency=order.currency,
                completed_at=order.completed_at,
                updated_at=order.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return order

    @Logger.io
    async def list_by_buyer(self, *, buyer_id: int) -> List[OrderEntity]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.buyer_id == buyer_id)
            .order_by(OrderModel.created_at.desc())
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def list_by_event(self, *, event_id: int) -> List[OrderEntity]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.event_id == event_id)
            .order_by(OrderModel.created_at.desc())
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def sum_sales_by_events(self, *, event_ids: Sequence[int]) -> int:
        if not event_ids:
            return 0
        total = await self.session.scalar(
            select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(
                OrderModel.event_id.in_(list(event_ids)),
                OrderModel.status.in_([OrderStatus.COMPLETED.value, OrderStatus.REFUNDED.value]),
            )
        )
        return int(total or 0)
