"""
Unit tests for CreateCheckoutUseCase

Checkout only prices and validates; capacity and promo usage are consumed
at confirmation, so nothing here may touch sold_quantity or current_uses.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import DomainError, ExternalServiceError
from src.service.ticketing.app.command.create_checkout_use_case import CreateCheckoutUseCase
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.entity.promo_code_entity import DiscountType
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.order_status import OrderStatus, PaymentStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_errors import (
    EventNotFoundError,
    InvalidPromoCodeError,
    SoldOutError,
    TierNotFoundError,
    TierNotOnSaleError,
)
from src.service.ticketing.domain.value_object.price_quote import TicketRequest
from src.service.ticketing.domain.value_object.tier_capacity import TierCapacity


def _request(use_case, *, event_id, items, promo_code=None):
    return use_case.create_checkout(
        buyer_id=2,
        buyer_email='buyer@example.com',
        buyer_name='Test Buyer',
        event_id=event_id,
        items=[TicketRequest(tier_id=tier_id, quantity=qty) for tier_id, qty in items],
        promo_code=promo_code,
    )


@pytest.mark.unit
class TestCreateCheckout:
    async def test_pending_rows_and_session_are_created(
        self, seed, store, make_checkout_use_case, payment_gateway
    ):
        """
        Given: a published event with GA (2000) and VIP (5000) tiers
        When: the buyer checks out 2 GA and 1 VIP
        Then: one pending order totalling 9000, a pending payment bound to the
        session and 3 pending tickets, sold_quantity untouched
        """
        # Arrange
        event = seed.event()
        ga = seed.tier(event_id=event.id, name='GA', base_price=2000)
        vip = seed.tier(event_id=event.id, name='VIP', base_price=5000)

        # Act
        result = await _request(
            make_checkout_use_case(), event_id=event.id, items=[(ga.id, 2), (vip.id, 1)]
        )

        # Assert
        assert result.quote.total == 9000
        assert result.session_id in payment_gateway.sessions
        assert result.checkout_url.endswith(result.session_id)

        order = store.get('orders', result.order.id)
        assert order.status == OrderStatus.PENDING
        assert order.total_amount == 9000

        (payment,) = store.all('payments')
        assert payment.status == PaymentStatus.PENDING
        assert payment.checkout_session_id == result.session_id

        tickets = store.all('tickets')
        assert len(tickets) == 3
        assert all(t.status == TicketStatus.PENDING and t.credential is None for t in tickets)
        assert sorted(t.tier_id for t in tickets) == sorted([ga.id, ga.id, vip.id])

        assert store.get('tiers', ga.id).sold_quantity == 0
        assert store.get('tiers', vip.id).sold_quantity == 0

    async def test_session_metadata_points_back_at_order(
        self, seed, make_checkout_use_case, payment_gateway
    ):
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        promo = seed.promo(event_id=event.id)

        result = await _request(
            make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)], promo_code='SAVE15'
        )

        metadata = payment_gateway.sessions[result.session_id]['metadata']
        assert metadata['order_id'] == str(result.order.id)
        assert metadata['promo_code_id'] == str(promo.id)
        assert metadata['v'] == '1'

    async def test_promo_is_quoted_but_not_consumed(self, seed, store, make_checkout_use_case):
        event = seed.event()
        tier = seed.tier(event_id=event.id, base_price=300)
        promo = seed.promo(
            event_id=event.id, code='FIVER', discount_type=DiscountType.FIXED, discount_value=500
        )

        result = await _request(
            make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)], promo_code=' fiver '
        )

        assert result.quote.total == 0
        assert result.order.promo_code_id == promo.id
        assert store.get('promo_codes', promo.id).current_uses == 0

    async def test_unknown_event(self, make_checkout_use_case):
        with pytest.raises(EventNotFoundError):
            await _request(make_checkout_use_case(), event_id=999, items=[(1, 1)])

    async def test_unpublished_event(self, seed, store, make_checkout_use_case):
        event = seed.event(status=EventStatus.DRAFT)
        tier = seed.tier(event_id=event.id)

        with pytest.raises(DomainError, match='not available'):
            await _request(make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)])
        assert store.all('orders') == []

    async def test_tier_from_another_event(self, seed, make_checkout_use_case):
        event = seed.event()
        other = seed.event(title='Other')
        foreign_tier = seed.tier(event_id=other.id)

        with pytest.raises(TierNotFoundError):
            await _request(
                make_checkout_use_case(), event_id=event.id, items=[(foreign_tier.id, 1)]
            )

    @pytest.mark.parametrize(
        'tier_kwargs',
        [
            {'is_active': False},
            {'sale_start_at': datetime.now(timezone.utc) + timedelta(days=1)},
            {'sale_end_at': datetime.now(timezone.utc) - timedelta(days=1)},
        ],
    )
    async def test_tier_not_on_sale(self, seed, make_checkout_use_case, tier_kwargs):
        event = seed.event()
        tier = seed.tier(event_id=event.id, **tier_kwargs)

        with pytest.raises(TierNotOnSaleError):
            await _request(make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)])

    async def test_sold_out_is_rejected_early(self, seed, store, make_checkout_use_case):
        event = seed.event()
        tier = seed.tier(event_id=event.id, capacity=TierCapacity.limited(2), sold_quantity=2)

        with pytest.raises(SoldOutError):
            await _request(make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)])
        assert store.all('orders') == []

    async def test_unset_capacity_cannot_be_sold(self, seed, make_checkout_use_case):
        event = seed.event()
        tier = seed.tier(event_id=event.id, capacity=TierCapacity.unset())

        with pytest.raises(SoldOutError):
            await _request(make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)])

    async def test_unknown_promo_code(self, seed, store, make_checkout_use_case):
        event = seed.event()
        tier = seed.tier(event_id=event.id)

        with pytest.raises(InvalidPromoCodeError):
            await _request(
                make_checkout_use_case(), event_id=event.id, items=[(tier.id, 1)], promo_code='NOPE'
            )
        assert store.all('orders') == []

    async def test_too_many_tickets(self, seed, uow_factory, payment_gateway):
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        use_case = CreateCheckoutUseCase(
            uow=uow_factory(), payment_gateway=payment_gateway, max_per_tier=4
        )

        with pytest.raises(DomainError, match='between 1 and 4'):
            await _request(use_case, event_id=event.id, items=[(tier.id, 5)])

    async def test_processor_failure_cancels_pending_order(self, seed, store, uow_factory):
        """
        Given: the payment processor is unreachable
        When: the buyer checks out
        Then: the error propagates and the pending order, payment and tickets are closed
        """
        # Arrange
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        gateway = AsyncMock(spec=IPaymentGateway)
        gateway.create_checkout_session.side_effect = ExternalServiceError('processor down')
        use_case = CreateCheckoutUseCase(uow=uow_factory(), payment_gateway=gateway)

        # Act
        with pytest.raises(ExternalServiceError):
            await _request(use_case, event_id=event.id, items=[(tier.id, 2)])

        # Assert
        (order,) = store.all('orders')
        assert order.status == OrderStatus.CANCELLED
        (payment,) = store.all('payments')
        assert payment.status == PaymentStatus.FAILED
        assert all(t.status == TicketStatus.CANCELLED for t in store.all('tickets'))
