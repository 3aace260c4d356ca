"""
Unit tests for the payment webhook route

The route is mounted on a bare FastAPI app with the production exception
handlers; the container hands out the mock gateway and the unit of work
dependency is replaced by the in-memory fake.
"""

from dependency_injector import providers
from fastapi import FastAPI
import httpx
import pytest

from src.platform.config.di import container
from src.platform.database.unit_of_work import get_unit_of_work
from src.platform.exception.exception_handlers import register_exception_handlers
from src.service.ticketing.app.command import confirm_payment_use_case
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.domain.value_object.price_quote import TicketRequest
from src.service.ticketing.domain.value_object.tier_capacity import TierCapacity
from src.service.ticketing.driving_adapter.http_controller import payment_webhook_controller


@pytest.fixture
async def client(uow_factory, payment_gateway, credential_issuer, ticket_notifier):
    container.payment_gateway.override(providers.Object(payment_gateway))
    container.credential_issuer.override(providers.Object(credential_issuer))
    container.ticket_notifier.override(providers.Object(ticket_notifier))
    container.wire(modules=[payment_webhook_controller, confirm_payment_use_case])

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(payment_webhook_controller.router, prefix='/api/payment')
    app.dependency_overrides[get_unit_of_work] = uow_factory

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url='http://test'
    ) as http_client:
        yield http_client

    container.unwire()
    container.payment_gateway.reset_override()
    container.credential_issuer.reset_override()
    container.ticket_notifier.reset_override()


async def _checkout(make_checkout_use_case, event_id, tier_id):
    return await make_checkout_use_case().create_checkout(
        buyer_id=2,
        buyer_email='buyer@example.com',
        buyer_name='Test Buyer',
        event_id=event_id,
        items=[TicketRequest(tier_id=tier_id, quantity=1)],
    )


def _post(client, payload: bytes, signature: str):
    return client.post(
        '/api/payment/webhook',
        content=payload,
        headers={'x-mock-signature': signature, 'content-type': 'application/json'},
    )


@pytest.mark.unit
class TestPaymentWebhookRoute:
    async def test_completed_session_confirms_once(
        self, client, seed, store, make_checkout_use_case, payment_gateway
    ):
        """
        Given: a pending checkout
        When: the processor delivers checkout.session.completed twice
        Then: first ack is confirmed, second already_processed, one sale recorded
        """
        # Arrange
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        checkout = await _checkout(make_checkout_use_case, event.id, tier.id)
        payload, signature = payment_gateway.complete_session(checkout.session_id)

        # Act
        first = await _post(client, payload, signature)
        second = await _post(client, payload, signature)

        # Assert
        assert first.status_code == 200
        assert first.json() == {'received': True, 'status': 'confirmed'}
        assert second.json() == {'received': True, 'status': 'already_processed'}
        assert store.get('tiers', tier.id).sold_quantity == 1

    async def test_bad_signature_is_400(
        self, client, seed, make_checkout_use_case, payment_gateway
    ):
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        checkout = await _checkout(make_checkout_use_case, event.id, tier.id)
        payload, _ = payment_gateway.complete_session(checkout.session_id)

        response = await _post(client, payload, 'forged')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_signature'

    async def test_sold_out_is_acknowledged(
        self, client, seed, store, make_checkout_use_case, payment_gateway
    ):
        # Arrange
        event = seed.event()
        tier = seed.tier(event_id=event.id, capacity=TierCapacity.limited(1))
        first = await _checkout(make_checkout_use_case, event.id, tier.id)
        second = await _checkout(make_checkout_use_case, event.id, tier.id)
        await _post(client, *payment_gateway.complete_session(first.session_id))

        # Act
        response = await _post(client, *payment_gateway.complete_session(second.session_id))

        # Assert
        assert response.status_code == 200
        assert response.json() == {'received': True, 'status': 'sold_out'}
        assert store.get('tiers', tier.id).sold_quantity == 1

    async def test_expired_session_cancels_order(
        self, client, seed, store, make_checkout_use_case, payment_gateway
    ):
        event = seed.event()
        tier = seed.tier(event_id=event.id)
        checkout = await _checkout(make_checkout_use_case, event.id, tier.id)

        response = await _post(client, *payment_gateway.expire_session(checkout.session_id))

        assert response.json() == {'received': True, 'status': 'failed'}
        assert store.get('orders', checkout.order.id).status == OrderStatus.CANCELLED

    async def test_unrelated_event_is_ignored(self, client, payment_gateway):
        response = await _post(client, *payment_gateway.build_webhook('customer.created', {}))

        assert response.json() == {'received': True, 'status': 'ignored'}
