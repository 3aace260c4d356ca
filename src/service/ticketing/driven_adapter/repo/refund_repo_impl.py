from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_refund_repo import IRefundRepo
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.enum.order_status import RefundStatus
from src.service.ticketing.driven_adapter.model.order_model import OrderModel
from src.service.ticketing.driven_adapter.model.refund_model import RefundModel


class RefundRepoImpl(IRefundRepo):
    """Amounts are fixed at reservation; only the settlement columns are updated"""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, refund: RefundEntity) -> RefundEntity:
        self.session.add(
            RefundModel(
                id=refund.id,
                order_id=refund.order_id,
                amount=refund.amount,
                reason=refund.reason,
                status=refund.status.value,
                external_reference=refund.external_reference,
                processed_by=refund.processed_by,
                processed_at=refund.processed_at,
            )
        )
        await self.session.flush()
        return refund

    @Logger.io
    async def update(self, *, refund: RefundEntity) -> RefundEntity:
        await self.session.execute(
            update(RefundModel)
            .where(RefundModel.id == refund.id)
            .values(
                status=refund.status.value,
                external_reference=refund.external_reference,
                processed_at=refund.processed_at,
            )
        )
        return refund

    async def _sum_by_order(self, *, order_id: UUID, statuses: tuple[RefundStatus, ...]) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.sum(RefundModel.amount), 0)).where(
                RefundModel.order_id == order_id,
                RefundModel.status.in_([status.value for status in statuses]),
            )
        )
        return int(result.scalar_one())

    @Logger.io
    async def sum_completed_by_order(self, *, order_id: UUID) -> int:
        return await self._sum_by_order(order_id=order_id, statuses=(RefundStatus.COMPLETED,))

    @Logger.io
    async def sum_reserved_by_order(self, *, order_id: UUID) -> int:
        return await self._sum_by_order(
            order_id=order_id,
            statuses=(RefundStatus.PENDING, RefundStatus.PROCESSING, RefundStatus.COMPLETED),
        )

    @Logger.io
    async def sum_completed_by_events(self, *, event_ids: Sequence[int]) -> int:
        if not event_ids:
            return 0
        total = await self.session.scalar(
            select(func.coalesce(func.sum(RefundModel.amount), 0))
            .join(OrderModel, OrderModel.id == RefundModel.order_id)
            .where(
                OrderModel.event_id.in_(list(event_ids)),
                RefundModel.status == RefundStatus.COMPLETED.value,
            )
        )
        return int(total or 0)
