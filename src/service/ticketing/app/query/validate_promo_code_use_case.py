from datetime import datetime, timezone
from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ticketing_result import PromoValidationResult
from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity
from src.service.ticketing.domain.ticketing_errors import InvalidPromoCodeError


class ValidatePromoCodeUseCase:
    """Read-only preview of a promo code; nothing is reserved or consumed"""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def validate(self, *, event_id: int, code: str) -> PromoValidationResult:
        async with self.uow:
            promo_code = await self.uow.promo_codes.get_by_code(
                event_id=event_id, code=PromoCodeEntity.normalize_code(code)
            )

        if promo_code is None:
            raise InvalidPromoCodeError('Invalid promo code')
        promo_code.ensure_redeemable(now=datetime.now(timezone.utc))

        return PromoValidationResult(
            promo_code=promo_code, remaining_uses=promo_code.remaining_uses
        )
