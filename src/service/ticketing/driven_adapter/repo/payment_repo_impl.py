from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.domain.entity.payment_entity import PaymentEntity
from src.service.ticketing.domain.enum.order_status import PaymentStatus
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel


class PaymentRepoImpl(IPaymentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: PaymentModel) -> PaymentEntity:
        return PaymentEntity(
            id=model.id,
            order_id=model.order_id,
            amount=model.amount,
            currency=model.currency,
            status=PaymentStatus(model.status),
            checkout_session_id=model.checkout_session_id,
            external_reference=model.external_reference,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create(self, *, payment: PaymentEntity) -> PaymentEntity:
        model = PaymentModel(
            id=payment.id,
            order_id=payment.order_id,
            amount=payment.amount,
            currency=payment.currency,
            status=payment.status.value,
            checkout_session_id=payment.checkout_session_id,
            external_reference=payment.external_reference,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_order_id(self, *, order_id: UUID) -> Optional[PaymentEntity]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_external_reference(
        self, *, external_reference: str
    ) -> Optional[PaymentEntity]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.external_reference == external_reference)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def update(self, *, payment: PaymentEntity) -> PaymentEntity:
        await self.session.execute(
            update(PaymentModel)
            .where(PaymentModel.id == payment.id)
            .values(
                amount=payment.amount,
                currency=payment.currency,
                status=payment.status.value,
                checkout_session_id=payment.checkout_session_id,
                external_reference=payment.external_reference,
                updated_at=payment.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return payment
