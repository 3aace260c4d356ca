from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.ticketing_errors import InvalidPromoCodeError


MAX_CODE_LENGTH = 50


class DiscountType(StrEnum):
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


@attrs.define
class PromoCodeEntity:
    event_id: int
    code: str
    discount_type: DiscountType
    discount_value: int
    valid_from: datetime
    valid_to: datetime
    max_uses: Optional[int] = None
    current_uses: int = 0
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def normalize_code(code: str) -> str:
        return code.strip().upper()

    @classmethod
    def create(
        cls,
        *,
        event_id: int,
        code: str,
        discount_type: DiscountType,
        discount_value: int,
        valid_from: datetime,
        valid_to: datetime,
        max_uses: Optional[int] = None,
    ) -> 'PromoCodeEntity':
        normalized = cls.normalize_code(code)
        if not normalized or len(normalized) > MAX_CODE_LENGTH:
            raise DomainError(f'Promo code must be 1-{MAX_CODE_LENGTH} characters')
        if valid_to < valid_from:
            raise DomainError('Promo code valid_to must be after valid_from')
        if discount_type == DiscountType.PERCENTAGE and not 1 <= discount_value <= 100:
            raise DomainError('Percentage discount must be between 1 and 100')
        if discount_type == DiscountType.FIXED and discount_value < 1:
            raise DomainError('Fixed discount must be positive')
        if max_uses is not None and max_uses < 1:
            raise DomainError('max_uses must be at least 1')
        return cls(
            event_id=event_id,
            code=normalized,
            discount_type=DiscountType(discount_type),
            discount_value=discount_value,
            valid_from=valid_from,
            valid_to=valid_to,
            max_uses=max_uses,
        )

    @property
    def remaining_uses(self) -> Optional[int]:
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.current_uses)

    def ensure_redeemable(self, *, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        if not self.is_active:
            raise InvalidPromoCodeError('Invalid promo code')
        if now < self.valid_from:
            raise InvalidPromoCodeError('Promo code is not yet valid')
        if now > self.valid_to:
            raise InvalidPromoCodeError('Promo code has expired')
        self.ensure_uses_left()

    def discount_for(self, subtotal: int) -> int:
        """Never more than the subtotal, so the total cannot go negative"""
        if self.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal * self.discount_value // 100
        else:
            discount = self.discount_value
        return min(discount, subtotal)

    def ensure_uses_left(self) -> None:
        """Guard for one more redemption; the counter itself is incremented in SQL"""
        if self.max_uses is not None and self.current_uses >= self.max_uses:
            raise InvalidPromoCodeError('Promo code has reached its usage limit')
