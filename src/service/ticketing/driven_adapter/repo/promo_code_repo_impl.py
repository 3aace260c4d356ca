from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_promo_code_repo import IPromoCodeRepo
from src.service.ticketing.domain.entity.promo_code_entity import DiscountType, PromoCodeEntity
from src.service.ticketing.driven_adapter.model.promo_code_model import PromoCodeModel


class PromoCodeRepoImpl(IPromoCodeRepo):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _model_to_entity(model: PromoCodeModel) -> PromoCodeEntity:
        return PromoCodeEntity(
            id=model.id,
            event_id=model.event_id,
            code=model.code,
            discount_type=DiscountType(model.discount_type),
            discount_value=model.discount_value,
            max_uses=model.max_uses,
            current_uses=model.current_uses,
            valid_from=model.valid_from,
            valid_to=model.valid_to,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @Logger.io
    async def create(self, *, promo_code: PromoCodeEntity) -> PromoCodeEntity:
        model = PromoCodeModel(
            event_id=promo_code.event_id,
            code=promo_code.code,
            discount_type=promo_code.discount_type.value,
            discount_value=promo_code.discount_value,
            max_uses=promo_code.max_uses,
            current_uses=promo_code.current_uses,
            valid_from=promo_code.valid_from,
            valid_to=promo_code.valid_to,
            is_active=promo_code.is_active,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_code(self, *, event_id: int, code: str) -> Optional[PromoCodeEntity]:
        result = await self.session.execute(
            select(PromoCodeModel).where(
                PromoCodeModel.event_id == event_id,
                PromoCodeModel.code == PromoCodeEntity.normalize_code(code),
            )
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_by_event(self, *, event_id: int) -> List[PromoCodeEntity]:
        result = await self.session.execute(
            select(PromoCodeModel)
            .where(PromoCodeModel.event_id == event_id)
            .order_by(PromoCodeModel.created_at, PromoCodeModel.id)
        )
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @Logger.io
    async def get_by_id_for_update(self, *, promo_code_id: int) -> Optional[PromoCodeEntity]:
        result = await self.session.execute(
            select(PromoCodeModel)
            .where(PromoCodeModel.id == promo_code_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def increment_uses(self, *, promo_code_id: int) -> int:
        result = await self.session.execute(
            update(PromoCodeModel)
            .where(PromoCodeModel.id == promo_code_id)
            .values(current_uses=PromoCodeModel.current_uses + 1, updated_at=func.now())
            .returning(PromoCodeModel.current_uses)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()
