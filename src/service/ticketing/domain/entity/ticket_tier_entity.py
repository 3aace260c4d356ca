from datetime import datetime, timezone
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.value_object.tier_capacity import TierCapacity


@attrs.define
class TicketTierEntity:
    event_id: int
    name: str
    base_price: int
    capacity: TierCapacity
    sold_quantity: int = 0
    description: str = ''
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        event_id: int,
        name: str,
        base_price: int,
        capacity: TierCapacity,
        description: str = '',
        sale_start_at: Optional[datetime] = None,
        sale_end_at: Optional[datetime] = None,
    ) -> 'TicketTierEntity':
        if not name.strip():
            raise DomainError('Tier name cannot be empty')
        if base_price < 0:
            raise DomainError('Tier price cannot be negative')
        if sale_start_at and sale_end_at and sale_end_at < sale_start_at:
            raise DomainError('Tier sale end must be after sale start')
        return cls(
            event_id=event_id,
            name=name.strip(),
            base_price=base_price,
            capacity=capacity,
            description=description,
            sale_start_at=sale_start_at,
            sale_end_at=sale_end_at,
        )

    @property
    def remaining(self) -> Optional[int]:
        return self.capacity.remaining(self.sold_quantity)

    def is_on_sale(self, *, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        if not self.is_active:
            return False
        if self.sale_start_at and now < self.sale_start_at:
            return False
        if self.sale_end_at and now > self.sale_end_at:
            return False
        return True
