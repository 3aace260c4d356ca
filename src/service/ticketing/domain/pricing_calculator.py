"""
Pricing Calculator

Pure function from (requested tiers, event tiers, optional promo code, now)
to a PriceQuote. All amounts are integer minor units:

- percentage discount: floor(subtotal * percent / 100)
- fixed discount: capped at the subtotal, so total = max(0, subtotal - value)

Example: subtotal 1099 with a 15% code gives discount 164 and total 935.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.ticketing_errors import TierNotFoundError
from src.service.ticketing.domain.value_object.price_quote import (
    LineItem,
    PriceQuote,
    TicketRequest,
)


def validate_ticket_requests(
    requests: Sequence[TicketRequest], *, max_per_tier: int, max_per_order: int
) -> None:
    if not requests:
        raise DomainError('At least one ticket is required')

    seen: set[int] = set()
    for request in requests:
        if request.tier_id in seen:
            raise DomainError(f'Ticket tier {request.tier_id} requested more than once')
        seen.add(request.tier_id)
        if not 1 <= request.quantity <= max_per_tier:
            raise DomainError(f'Quantity per tier must be between 1 and {max_per_tier}')

    if sum(r.quantity for r in requests) > max_per_order:
        raise DomainError(f'Maximum {max_per_order} tickets per order')


def calculate_price(
    *,
    requests: Sequence[TicketRequest],
    tiers: Iterable[TicketTierEntity],
    promo_code: Optional[PromoCodeEntity] = None,
    now: datetime,
) -> PriceQuote:
    tiers_by_id = {tier.id: tier for tier in tiers}

    line_items = []
    for request in requests:
        tier = tiers_by_id.get(request.tier_id)
        if tier is None:
            raise TierNotFoundError(request.tier_id)
        line_items.append(
            LineItem(
                tier_id=request.tier_id,
                tier_name=tier.name,
                unit_price=tier.base_price,
                quantity=request.quantity,
            )
        )

    subtotal = sum(item.line_total for item in line_items)

    discount = 0
    if promo_code is not None:
        promo_code.ensure_redeemable(now=now)
        discount = promo_code.discount_for(subtotal)

    return PriceQuote(
        line_items=tuple(line_items),
        subtotal=subtotal,
        discount=discount,
        total=max(0, subtotal - discount),
        promo_code_id=promo_code.id if promo_code else None,
        promo_code=promo_code.code if promo_code else None,
    )
