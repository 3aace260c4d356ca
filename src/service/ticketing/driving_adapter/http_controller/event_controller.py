from typing import List

from fastapi import APIRouter, Depends, Query, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.create_event_use_case import CreateEventUseCase
from src.service.ticketing.app.command.create_promo_code_use_case import CreatePromoCodeUseCase
from src.service.ticketing.app.query.get_event_use_case import GetEventUseCase
from src.service.ticketing.app.query.list_event_orders_use_case import ListEventOrdersUseCase
from src.service.ticketing.app.query.list_events_use_case import MAX_PAGE_SIZE, ListEventsUseCase
from src.service.ticketing.app.query.list_promo_codes_use_case import ListPromoCodesUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import require_organizer
from src.service.ticketing.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventListResponse,
    EventResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.order_schema import (
    EventOrderResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.promo_code_schema import (
    PromoCodeCreateRequest,
    PromoCodeResponse,
)


router = APIRouter()


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_events(
    search: str = Query(default='', max_length=200),
    city: str = Query(default='', max_length=100),
    category: str = Query(default='', max_length=50),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=MAX_PAGE_SIZE),
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> EventListResponse:
    """Published events, soonest first"""
    result = await use_case.list_events(
        search=search, city=city, category=category, page=page, limit=limit
    )
    return EventListResponse.from_page(result)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    detail = await use_case.create_event(
        organizer_id=current_user.id or 0,
        title=request.title,
        description=request.description,
        venue=request.venue,
        address=request.address,
        city=request.city,
        category=request.category,
        start_at=request.start_at,
        end_at=request.end_at,
        timezone=request.timezone,
        tiers=[tier.to_draft() for tier in request.tiers],
    )
    return EventResponse.from_detail(detail)


@router.get('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_event(
    event_id: int,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    """Event details with remaining availability per tier"""
    detail = await use_case.get_by_id(event_id=event_id)
    return EventResponse.from_detail(detail)


@router.post('/{event_id}/promo_code', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_promo_code(
    event_id: int,
    request: PromoCodeCreateRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CreatePromoCodeUseCase = Depends(CreatePromoCodeUseCase.depends),
) -> PromoCodeResponse:
    promo_code = await use_case.create_promo_code(
        organizer_id=current_user.id or 0,
        event_id=event_id,
        code=request.code,
        discount_type=request.discount_type,
        discount_value=request.discount_value,
        valid_from=request.valid_from,
        valid_to=request.valid_to,
        max_uses=request.max_uses,
    )
    return PromoCodeResponse.from_entity(promo_code)


@router.get('/{event_id}/promo_code', status_code=status.HTTP_200_OK)
@Logger.io
async def list_promo_codes(
    event_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListPromoCodesUseCase = Depends(ListPromoCodesUseCase.depends),
) -> List[PromoCodeResponse]:
    promo_codes = await use_case.list_promo_codes(
        event_id=event_id, organizer_id=current_user.id or 0
    )
    return [PromoCodeResponse.from_entity(promo_code) for promo_code in promo_codes]


@router.get('/{event_id}/orders', status_code=status.HTTP_200_OK)
@Logger.io
async def list_event_orders(
    event_id: int,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListEventOrdersUseCase = Depends(ListEventOrdersUseCase.depends),
) -> List[EventOrderResponse]:
    views = await use_case.list_event_orders(event_id=event_id, organizer_id=current_user.id or 0)
    return [EventOrderResponse.from_view(view) for view in views]
