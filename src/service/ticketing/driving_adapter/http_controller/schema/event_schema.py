from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from src.service.ticketing.app.dto.ticketing_result import EventDetail, EventPage, TierDraft
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.value_object.tier_capacity import CapacityMode, TierCapacity


class TierCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ''
    price: int = Field(..., ge=0, description='Minor currency units')
    quantity: Optional[int] = Field(
        default=None, ge=1, description='Required unless unlimited is true'
    )
    unlimited: bool = False
    sale_start_at: Optional[datetime] = None
    sale_end_at: Optional[datetime] = None

    @model_validator(mode='after')
    def check_capacity(self) -> 'TierCreateRequest':
        # Zero or missing quantity never means unlimited
        if self.unlimited and self.quantity is not None:
            raise ValueError('An unlimited tier cannot declare a quantity')
        if not self.unlimited and self.quantity is None:
            raise ValueError('quantity is required unless the tier is unlimited')
        return self

    def to_draft(self) -> TierDraft:
        capacity = (
            TierCapacity.unlimited() if self.unlimited else TierCapacity.limited(self.quantity or 0)
        )
        return TierDraft(
            name=self.name,
            base_price=self.price,
            capacity=capacity,
            description=self.description,
            sale_start_at=self.sale_start_at,
            sale_end_at=self.sale_end_at,
        )


class EventCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ''
    venue: str = Field(..., min_length=1, max_length=200)
    address: str = ''
    city: str = Field(default='', max_length=100)
    category: str = Field(default='', max_length=50)
    start_at: datetime
    end_at: datetime
    timezone: str = 'UTC'
    tiers: List[TierCreateRequest] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            'example': {
                'title': 'Summer Jazz Night',
                'description': 'Open air jazz',
                'venue': 'Riverside Park',
                'address': '1 River Rd',
                'city': 'Austin',
                'category': 'music',
                'start_at': '2030-07-01T19:00:00Z',
                'end_at': '2030-07-01T23:00:00Z',
                'timezone': 'UTC',
                'tiers': [
                    {'name': 'GA', 'price': 5000, 'quantity': 200},
                    {'name': 'Livestream', 'price': 1000, 'unlimited': True},
                ],
            }
        }


class TierResponse(BaseModel):
    id: int
    name: str
    description: str
    price: int
    capacity_mode: CapacityMode
    total_quantity: Optional[int]
    sold_quantity: int
    remaining: Optional[int]
    on_sale: bool

    @classmethod
    def from_entity(cls, tier: TicketTierEntity) -> 'TierResponse':
        return cls(
            id=tier.id or 0,
            name=tier.name,
            description=tier.description,
            price=tier.base_price,
            capacity_mode=tier.capacity.mode,
            total_quantity=tier.capacity.total,
            sold_quantity=tier.sold_quantity,
            remaining=tier.remaining,
            on_sale=tier.is_on_sale(),
        )


class EventResponse(BaseModel):
    id: int
    organizer_id: int
    title: str
    description: str
    venue: str
    address: str
    city: str
    category: str
    start_at: datetime
    end_at: datetime
    timezone: str
    status: str
    tiers: List[TierResponse]

    @classmethod
    def from_detail(cls, detail: EventDetail) -> 'EventResponse':
        event = detail.event
        return cls(
            id=event.id or 0,
            organizer_id=event.organizer_id,
            title=event.title,
            description=event.description,
            venue=event.venue,
            address=event.address,
            city=event.city,
            category=event.category,
            start_at=event.start_at,
            end_at=event.end_at,
            timezone=event.timezone,
            status=event.status.value,
            tiers=[TierResponse.from_entity(tier) for tier in detail.tiers],
        )


class EventListResponse(BaseModel):
    items: List[EventResponse]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_page(cls, page: EventPage) -> 'EventListResponse':
        return cls(
            items=[EventResponse.from_detail(detail) for detail in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )
