"""
Inventory Guard

Runs twice per purchase: once when the checkout session is created (advisory,
reserves nothing) and again inside the payment commit transaction with the
tier rows locked FOR UPDATE, which is the check that actually counts.
"""

from collections import Counter
from typing import Iterable, Mapping

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.ticketing_errors import SoldOutError, TierNotFoundError


def ensure_available(tier: TicketTierEntity, requested: int) -> None:
    if not tier.capacity.allows(sold=tier.sold_quantity, requested=requested):
        raise SoldOutError(tier_id=tier.id, tier_name=tier.name)


def ensure_all_available(
    *, tiers: Iterable[TicketTierEntity], quantities: Mapping[int, int]
) -> None:
    tiers_by_id = {tier.id: tier for tier in tiers}
    for tier_id, quantity in quantities.items():
        tier = tiers_by_id.get(tier_id)
        if tier is None:
            raise TierNotFoundError(tier_id)
        ensure_available(tier, quantity)


def count_by_tier(tickets: Iterable[TicketEntity]) -> dict[int, int]:
    return dict(Counter(ticket.tier_id for ticket in tickets))
