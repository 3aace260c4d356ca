"""
Unit tests for FailPaymentUseCase
"""

import pytest
from uuid_utils.compat import uuid7

from src.service.ticketing.app.command.fail_payment_use_case import FailPaymentUseCase
from src.service.ticketing.app.dto.payment_dto import PaymentFailed
from src.service.ticketing.domain.enum.order_status import OrderStatus, PaymentStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.price_quote import TicketRequest


@pytest.fixture
async def pending_checkout(seed, make_checkout_use_case):
    event = seed.event()
    tier = seed.tier(event_id=event.id)
    return await make_checkout_use_case().create_checkout(
        buyer_id=2,
        buyer_email='buyer@example.com',
        buyer_name='Test Buyer',
        event_id=event.id,
        items=[TicketRequest(tier_id=tier.id, quantity=2)],
    )


@pytest.mark.unit
class TestFailPayment:
    async def test_expired_session_cancels_pending_order(
        self, store, uow_factory, payment_gateway, pending_checkout
    ):
        """
        Given: a pending checkout
        When: the processor reports the session expired
        Then: order cancelled, payment failed, tickets cancelled
        """
        # Arrange
        payload, signature = payment_gateway.expire_session(pending_checkout.session_id)
        signal = payment_gateway.parse_webhook(payload=payload, signature=signature)

        # Act
        cancelled = await FailPaymentUseCase(uow=uow_factory()).fail_payment(signal=signal)

        # Assert
        assert cancelled.status == OrderStatus.CANCELLED
        assert store.get('orders', pending_checkout.order.id).status == OrderStatus.CANCELLED
        (payment,) = store.all('payments')
        assert payment.status == PaymentStatus.FAILED
        assert all(t.status == TicketStatus.CANCELLED for t in store.all('tickets'))

    async def test_declined_attempt_leaves_order_pending(
        self, store, uow_factory, pending_checkout
    ):
        signal = PaymentFailed(
            order_id=pending_checkout.order.id, reason='card_declined', final=False
        )

        result = await FailPaymentUseCase(uow=uow_factory()).fail_payment(signal=signal)

        assert result is None
        assert store.get('orders', pending_checkout.order.id).status == OrderStatus.PENDING

    async def test_replay_is_a_no_op(self, store, uow_factory, pending_checkout):
        signal = PaymentFailed(order_id=pending_checkout.order.id, reason='expired')
        await FailPaymentUseCase(uow=uow_factory()).fail_payment(signal=signal)

        uow = uow_factory()
        result = await FailPaymentUseCase(uow=uow).fail_payment(signal=signal)

        assert result.status == OrderStatus.CANCELLED
        assert uow.commit_count == 0

    async def test_completed_order_is_left_alone(self, store, seed, purchase, uow_factory):
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        purchased = await purchase(event_id=event.id, items=[(tier.id, 1)])

        result = await FailPaymentUseCase(uow=uow_factory()).fail_payment(
            signal=PaymentFailed(order_id=purchased.order.id, reason='expired')
        )

        assert result.status == OrderStatus.COMPLETED
        assert store.get('tiers', tier.id).sold_quantity == 1

    async def test_unknown_order_is_ignored(self, uow_factory):
        result = await FailPaymentUseCase(uow=uow_factory()).fail_payment(
            signal=PaymentFailed(order_id=uuid7())
        )

        assert result is None
