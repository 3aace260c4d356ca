"""
Mock Payment Gateway

Stands in for the processor in development and tests. Webhooks are signed
with HMAC-SHA256 over the raw body (base64 in the `x-mock-signature`
header) and carry the same event shape as Stripe, so the webhook route and
the signal mapping are exercised exactly as in production.
"""

import base64
import hashlib
import hmac
from typing import Any, Optional

import orjson
from uuid_utils.compat import uuid7

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


MOCK_SIGNATURE_HEADER = 'x-mock-signature'


class MockPaymentGateway(IPaymentGateway):
    signature_header = MOCK_SIGNATURE_HEADER

    def __init__(self, *, webhook_secret: str, checkout_base_url: str = '/mockpay') -> None:
        self._secret = webhook_secret.encode('utf-8')
        self.checkout_base_url = checkout_base_url
        self.sessions: dict[str, dict[str, Any]] = {}
        self.refunds: list[dict[str, Any]] = []
        # Set to make the next refund call fail (tests and failure drills)
        self.fail_refunds = False

    def sign(self, payload: bytes) -> str:
        mac = hmac.new(self._secret, payload, hashlib.sha256).digest()
        return base64.b64encode(mac).decode('ascii')

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
        session_id = f'mock_cs_{uuid7().hex}'
        self.sessions[session_id] = {
            'id': session_id,
            'object': 'checkout.session',
            'amount_total': quote.total,
            'currency': currency,
            'customer_email': customer_email,
            'metadata': metadata.to_processor_metadata(),
            'payment_status': 'unpaid',
            'payment_intent': None,
        }
        return CheckoutSession(session_id=session_id, url=f'{self.checkout_base_url}/{session_id}')

    def complete_session(self, session_id: str) -> tuple[bytes, str]:
        """
        Simulate the buyer paying: marks the session paid and returns a signed
        `checkout.session.completed` webhook (body, signature)
        """
        session = self.sessions[session_id]
        session['payment_status'] = 'paid'
        session['payment_intent'] = session['payment_intent'] or f'mock_pi_{uuid7().hex}'
        return self.build_webhook('checkout.session.completed', session)

    def expire_session(self, session_id: str) -> tuple[bytes, str]:
        return self.build_webhook('checkout.session.expired', self.sessions[session_id])

    def build_webhook(self, event_type: str, data_object: dict[str, Any]) -> tuple[bytes, str]:
        payload = orjson.dumps(
            {'id': f'mock_evt_{uuid7().hex}', 'type': event_type, 'data': {'object': data_object}}
        )
        return payload, self.sign(payload)

    @Logger.io
    async def refund(
        self, *, external_reference: str, amount: int, metadata: dict[str, str]
    ) -> RefundReceipt:
        if self.fail_refunds:
            raise RefundProcessorError('Mock processor rejected the refund')
        refund_id = f'mock_re_{uuid7().hex}'
        self.refunds.append(
            {
                'id': refund_id,
                'payment_intent': external_reference,
                'amount': amount,
                'metadata': metadata,
            }
        )
        return RefundReceipt(external_reference=refund_id, status='succeeded')

    def parse_webhook(self, *, payload: bytes, signature: Optional[str]) -> Optional[PaymentSignal]:
        if not signature or not hmac.compare_digest(self.sign(payload), signature):
            raise PaymentSignatureError('Invalid webhook signature')
        try:
            event = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise PaymentSignatureError('Invalid webhook payload') from e

        return event_to_signal(event.get('type', ''), event.get('data', {}).get('object', {}))

    @Logger.io
    async def retrieve_checkout_session(self, *, session_id: str) -> Optional[PaymentSignal]:
        session = self.sessions.get(session_id)
        if session is None:
            return None
        return session_to_signal(session)
