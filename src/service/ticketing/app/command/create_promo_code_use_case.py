from datetime import datetime
from typing import Optional, Self

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.promo_code_entity import DiscountType, PromoCodeEntity
from src.service.ticketing.domain.ticketing_errors import EventNotFoundError


class CreatePromoCodeUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def create_promo_code(
        self,
        *,
        organizer_id: int,
        event_id: int,
        code: str,
        discount_type: DiscountType,
        discount_value: int,
        valid_from: datetime,
        valid_to: datetime,
        max_uses: Optional[int] = None,
    ) -> PromoCodeEntity:
        with self.tracer.start_as_current_span(
            'use_case.create_promo_code',
            attributes={'event.id': event_id, 'organizer.id': organizer_id},
        ):
            promo_code = PromoCodeEntity.create(
                event_id=event_id,
                code=code,
                discount_type=discount_type,
                discount_value=discount_value,
                valid_from=valid_from,
                valid_to=valid_to,
                max_uses=max_uses,
            )

            async with self.uow:
                event = await self.uow.events.get_by_id(event_id=event_id)
                if event is None:
                    raise EventNotFoundError()
                event.ensure_owned_by(organizer_id)

                existing = await self.uow.promo_codes.get_by_code(
                    event_id=event_id, code=promo_code.code
                )
                if existing is not None:
                    raise ConflictError('Promo code already exists for this event')

                created = await self.uow.promo_codes.create(promo_code=promo_code)
                await self.uow.commit()

            Logger.base.info(f'🏷️ [PROMO] Created {created.code} for event {event_id}')
            return created
