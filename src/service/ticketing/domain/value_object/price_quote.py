from typing import Optional

import attrs


@attrs.frozen
class TicketRequest:
    tier_id: int
    quantity: int


@attrs.frozen
class LineItem:
    tier_id: int
    tier_name: str
    unit_price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@attrs.frozen
class PriceQuote:
    """Amounts in minor currency units"""

    line_items: tuple[LineItem, ...]
    subtotal: int
    discount: int
    total: int
    promo_code_id: Optional[int] = None
    promo_code: Optional[str] = None

    @property
    def ticket_count(self) -> int:
        return sum(item.quantity for item in self.line_items)
