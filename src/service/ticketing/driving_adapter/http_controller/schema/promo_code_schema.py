from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.service.ticketing.domain.entity.promo_code_entity import DiscountType, PromoCodeEntity


class PromoCodeCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    discount_type: DiscountType
    discount_value: int = Field(..., ge=1)
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: datetime
    valid_to: datetime

    class Config:
        json_schema_extra = {
            'example': {
                'code': 'EARLYBIRD',
                'discount_type': 'percentage',
                'discount_value': 15,
                'max_uses': 100,
                'valid_from': '2030-01-01T00:00:00Z',
                'valid_to': '2030-06-30T23:59:59Z',
            }
        }


class PromoCodeValidateRequest(BaseModel):
    event_id: int
    code: str = Field(..., min_length=1, max_length=50)


class PromoCodeResponse(BaseModel):
    id: int
    event_id: int
    code: str
    discount_type: DiscountType
    discount_value: int
    max_uses: Optional[int]
    current_uses: int
    valid_from: datetime
    valid_to: datetime
    is_active: bool

    @classmethod
    def from_entity(cls, promo_code: PromoCodeEntity) -> 'PromoCodeResponse':
        return cls(
            id=promo_code.id or 0,
            event_id=promo_code.event_id,
            code=promo_code.code,
            discount_type=promo_code.discount_type,
            discount_value=promo_code.discount_value,
            max_uses=promo_code.max_uses,
            current_uses=promo_code.current_uses,
            valid_from=promo_code.valid_from,
            valid_to=promo_code.valid_to,
            is_active=promo_code.is_active,
        )


class PromoCodeValidationResponse(BaseModel):
    valid: bool = True
    code: str
    discount_type: DiscountType
    discount_value: int
    remaining_uses: Optional[int]
