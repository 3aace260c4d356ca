"""
Unit tests for request validation and response mapping of the HTTP schemas
"""

from datetime import datetime, timezone

from pydantic import ValidationError
import pytest

from src.service.ticketing.app.dto.ticketing_result import EventDetail, EventPage
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.payout_entity import PayoutEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.payout_status import PayoutStatus
from src.service.ticketing.domain.value_object.payout_summary import PayoutSummary
from src.service.ticketing.domain.value_object.tier_capacity import CapacityMode, TierCapacity
from src.service.ticketing.driving_adapter.http_controller.schema.checkout_schema import (
    CheckoutCreateRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.event_schema import (
    EventListResponse,
    EventResponse,
    TierCreateRequest,
)
from src.service.ticketing.driving_adapter.http_controller.schema.organizer_schema import (
    PayoutSummaryResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketTransferRequest,
)


@pytest.mark.unit
class TestTierCreateRequest:
    def test_limited_tier(self):
        draft = TierCreateRequest(name='GA', price=5000, quantity=200).to_draft()

        assert draft.capacity == TierCapacity.limited(200)
        assert draft.base_price == 5000

    def test_unlimited_tier_is_explicit(self):
        draft = TierCreateRequest(name='Stream', price=0, unlimited=True).to_draft()

        assert draft.capacity.mode == CapacityMode.UNLIMITED

    @pytest.mark.parametrize(
        'payload',
        [
            {'name': 'GA', 'price': 5000},  # no quantity, not unlimited
            {'name': 'GA', 'price': 5000, 'quantity': 0},  # zero is not unlimited
            {'name': 'GA', 'price': 5000, 'quantity': 10, 'unlimited': True},
            {'name': 'GA', 'price': -1, 'quantity': 10},
            {'name': '', 'price': 100, 'quantity': 10},
        ],
    )
    def test_invalid_tiers(self, payload):
        with pytest.raises(ValidationError):
            TierCreateRequest(**payload)


@pytest.mark.unit
class TestCheckoutCreateRequest:
    def test_to_ticket_requests(self):
        request = CheckoutCreateRequest(
            event_id=1, items=[{'tier_id': 3, 'quantity': 2}], promo_code='SAVE15'
        )

        (ticket_request,) = request.to_ticket_requests()
        assert (ticket_request.tier_id, ticket_request.quantity) == (3, 2)

    @pytest.mark.parametrize(
        'items', [[], [{'tier_id': 3, 'quantity': 0}], [{'tier_id': 3, 'quantity': -2}]]
    )
    def test_invalid_items(self, items):
        with pytest.raises(ValidationError):
            CheckoutCreateRequest(event_id=1, items=items)


@pytest.mark.unit
class TestTicketTransferRequest:
    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            TicketTransferRequest(recipient_name='Jane', recipient_email='not-an-email')


@pytest.mark.unit
class TestEventResponse:
    def test_capacity_fields_reflect_mode(self):
        start = datetime(2030, 7, 1, 19, tzinfo=timezone.utc)
        event = EventEntity(
            id=1,
            title='Jazz',
            organizer_id=1,
            venue='Park',
            start_at=start,
            end_at=start.replace(hour=23),
            status=EventStatus.PUBLISHED,
        )
        tiers = (
            TicketTierEntity(
                id=1, event_id=1, name='GA', base_price=5000,
                capacity=TierCapacity.limited(10), sold_quantity=4,
            ),
            TicketTierEntity(
                id=2, event_id=1, name='Stream', base_price=1000,
                capacity=TierCapacity.unlimited(), sold_quantity=50,
            ),
        )

        response = EventResponse.from_detail(EventDetail(event=event, tiers=tiers))

        ga, stream = response.tiers
        assert (ga.capacity_mode, ga.total_quantity, ga.remaining) == ('limited', 10, 6)
        assert (stream.capacity_mode, stream.total_quantity, stream.remaining) == (
            'unlimited',
            None,
            None,
        )
        assert response.status == 'published'

    def test_list_carries_page_counts(self):
        start = datetime(2030, 7, 1, 19, tzinfo=timezone.utc)
        event = EventEntity(
            id=7,
            title='Jazz',
            organizer_id=1,
            venue='Park',
            city='Austin',
            category='music',
            start_at=start,
            end_at=start.replace(hour=23),
        )
        page = EventPage(items=(EventDetail(event=event, tiers=()),), total=25, page=3, limit=12)

        response = EventListResponse.from_page(page)

        assert [item.id for item in response.items] == [7]
        assert (response.total, response.page, response.limit, response.pages) == (25, 3, 12, 3)
        assert (response.items[0].city, response.items[0].category) == ('Austin', 'music')


def _payout(payout_id: int, amount: int, status: PayoutStatus) -> PayoutEntity:
    return PayoutEntity(id=payout_id, organizer_id=1, amount=amount, currency='usd', status=status)


@pytest.mark.unit
class TestPayoutSummaryResponse:
    def test_balance_fields(self):
        summary = PayoutSummary.from_ledger(
            gross_sales=20000,
            refunded=3000,
            payouts=[
                _payout(1, 8000, PayoutStatus.PAID),
                _payout(2, 2000, PayoutStatus.SCHEDULED),
                _payout(3, 5000, PayoutStatus.FAILED),
            ],
        )

        response = PayoutSummaryResponse.from_summary(summary)

        assert response.total_earnings == 17000
        assert response.total_paid == 8000
        assert response.total_pending == 2000
        assert response.available_balance == 7000
        assert [payout.status for payout in response.payouts] == ['paid', 'scheduled', 'failed']
