from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payout_repo import IPayoutRepo
from src.service.ticketing.domain.entity.payout_entity import PayoutEntity
from src.service.ticketing.domain.enum.payout_status import PayoutStatus
from src.service.ticketing.driven_adapter.model.payout_model import PayoutModel


class PayoutRepoImpl(IPayoutRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: PayoutModel) -> PayoutEntity:
        return PayoutEntity(
            id=model.id,
            organizer_id=model.organizer_id,
            amount=model.amount,
            currency=model.currency,
            status=PayoutStatus(model.status),
            external_reference=model.external_reference,
            scheduled_at=model.scheduled_at,
            paid_at=model.paid_at,
            failure_reason=model.failure_reason,
            created_at=model.created_at,
        )

    @Logger.io
    async def list_by_organizer(self, *, organizer_id: int) -> List[PayoutEntity]:
        result = await self.session.execute(
            select(PayoutModel)
            .where(PayoutModel.organizer_id == organizer_id)
            .order_by(PayoutModel.created_at.desc(), PayoutModel.id.desc())
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]
