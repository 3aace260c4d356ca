"""
Stripe Payment Gateway

The stripe SDK is synchronous here; every call runs in a worker thread with
a deadline so a slow processor cannot pin the event loop or hold a request
open indefinitely.
"""

from functools import partial
from typing import Any, Callable, Optional, TypeVar

import anyio
import orjson
import stripe

from src.platform.exception.exceptions import ExternalServiceError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.payment_dto import (
    CheckoutMetadata,
    CheckoutSession,
    PaymentSignal,
    RefundReceipt,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.ticketing_errors import (
    PaymentSignatureError,
    RefundProcessorError,
)
from src.service.ticketing.domain.value_object.price_quote import PriceQuote
from src.service.ticketing.driven_adapter.payment.payment_signal_mapper import (
    event_to_signal,
    session_to_signal,
)


T = TypeVar('T')


class StripePaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        api_key: str,
        webhook_secret: str,
        success_url: str,
        cancel_url: str,
        timeout_seconds: float,
    ) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.success_url = success_url
        self.cancel_url = cancel_url
        self.timeout_seconds = timeout_seconds

    async def _call(self, func: Callable[..., T], **params: Any) -> T:
        with anyio.fail_after(self.timeout_seconds):
            return await anyio.to_thread.run_sync(
                partial(func, api_key=self.api_key, **params), abandon_on_cancel=True
            )

    @staticmethod
    def _line_items(*, quote: PriceQuote, currency: str, event_title: str) -> list[dict]:
        line_items = [
            {
                'price_data': {
                    'currency': currency,
                    'product_data': {'name': f'{event_title} - {item.tier_name}'},
                    'unit_amount': item.unit_price,
                },
                'quantity': item.quantity,
            }
            for item in quote.line_items
        ]
        return line_items

    @Logger.io
    async def create_checkout_session(
        self,
        *,
        quote: PriceQuote,
        currency: str,
        event_title: str,
        customer_email: Optional[str],
        metadata: CheckoutMetadata,
    ) -> CheckoutSession:
        processor_metadata = metadata.to_processor_metadata()
        params: dict[str, Any] = {
            'mode': 'payment',
            'line_items': self._line_items(quote=quote, currency=currency, event_title=event_title),
            'success_url': self.success_url,
            'cancel_url': self.cancel_url.format(event_id=metadata.event_id),
            'metadata': processor_metadata,
            # Copied onto the payment intent so payment_intent.* events carry the order id
            'payment_intent_data': {'metadata': processor_metadata},
            # Retrying the same order never opens a second session
            'idempotency_key': f'checkout-{metadata.order_id}',
        }
        if customer_email:
            params['customer_email'] = customer_email

        try:
            if quote.discount:
                coupon = await self._call(
                    stripe.Coupon.create,
                    amount_off=quote.discount,
                    currency=currency,
                    duration='once',
                    name=quote.promo_code or 'Discount',
                    idempotency_key=f'coupon-{metadata.order_id}',
                )
                params['discounts'] = [{'coupon': coupon.id}]
            session = await self._call(stripe.checkout.Session.create, **params)
        except TimeoutError as e:
            raise ExternalServiceError('Payment processor timed out') from e
        except stripe.StripeError as e:
            raise ExternalServiceError(f'Failed to create checkout session: {e}') from e

        Logger.base.info(f'💳 [CHECKOUT] Stripe session {session.id} for order {metadata.order_id}')
        return CheckoutSession(session_id=session.id, url=session.url)

    @Logger.io
    async def refund(
        self, *, external_reference: str, amount: int, metadata: dict[str, str]
    ) -> RefundReceipt:
        try:
            refund = await self._call(
                stripe.Refund.create,
                payment_intent=external_reference,
                amount=amount,
                reason='requested_by_customer',
                metadata=metadata,
            )
        except TimeoutError as e:
            raise RefundProcessorError('Refund request to payment processor timed out') from e
        except stripe.StripeError as e:
            raise RefundProcessorError(f'Stripe refund failed: {e.user_message or e}') from e

        if refund.status in ('failed', 'canceled'):
            raise RefundProcessorError(f'Stripe refund {refund.id} is {refund.status}')

        return RefundReceipt(external_reference=refund.id, status=refund.status)

    def parse_webhook(self, *, payload: bytes, signature: Optional[str]) -> Optional[PaymentSignal]:
        if not signature:
            raise PaymentSignatureError('Missing stripe-signature header')
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise PaymentSignatureError('Invalid webhook signature') from e
        except ValueError as e:
            raise PaymentSignatureError('Invalid webhook payload') from e

        event = orjson.loads(payload)
        return event_to_signal(event.get('type', ''), event.get('data', {}).get('object', {}))

    @Logger.io
    async def retrieve_checkout_session(self, *, session_id: str) -> Optional[PaymentSignal]:
        try:
            session = await self._call(stripe.checkout.Session.retrieve, id=session_id)
        except TimeoutError as e:
            raise ExternalServiceError('Payment processor timed out') from e
        except stripe.StripeError as e:
            raise ExternalServiceError(f'Failed to retrieve checkout session: {e}') from e

        return session_to_signal(session.to_dict())
