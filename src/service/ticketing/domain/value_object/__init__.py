"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.price_quote import LineItem, PriceQuote, TicketRequest
from src.service.ticketing.domain.value_object.ticket_credential import TicketCredential
from src.service.ticketing.domain.value_object.tier_capacity import CapacityMode, TierCapacity

__all__ = [
    'CapacityMode',
    'LineItem',
    'PriceQuote',
    'TicketCredential',
    'TicketRequest',
    'TierCapacity',
]
