"""
Translate processor event objects into PaymentSignal records.

Both gateway adapters deliver events shaped like Stripe's checkout session
and payment intent objects, so the mapping lives here once.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from src.service.ticketing.app.dto.payment_dto import (
    CheckoutMetadata,
    PaymentFailed,
    PaymentSignal,
    PaymentSucceeded,
)
from src.service.ticketing.domain.ticketing_errors import PaymentSignatureError


SESSION_SUCCEEDED_EVENTS = frozenset(
    {'checkout.session.completed', 'checkout.session.async_payment_succeeded'}
)
SESSION_FAILED_EVENTS = frozenset(
    {'checkout.session.expired', 'checkout.session.async_payment_failed'}
)
INTENT_FAILED_EVENTS = frozenset({'payment_intent.payment_failed'})
PAID_STATUSES = frozenset({'paid', 'no_payment_required'})


def parse_metadata(raw: Optional[Mapping[str, Any]]) -> CheckoutMetadata:
    try:
        return CheckoutMetadata.from_processor_metadata(dict(raw or {}))
    except ValidationError as e:
        raise PaymentSignatureError('Invalid checkout metadata') from e


def session_to_signal(session: Mapping[str, Any]) -> Optional[PaymentSignal]:
    """
    A checkout session that has been paid becomes PaymentSucceeded; an
    unpaid one (async payment methods still settling) yields None.
    """
    if session.get('payment_status') not in PAID_STATUSES:
        return None

    metadata = parse_metadata(session.get('metadata'))
    customer_details = session.get('customer_details') or {}
    amount_total = session.get('amount_total')
    if amount_total is None or not session.get('currency'):
        raise PaymentSignatureError('Checkout session is missing the settled amount')

    return PaymentSucceeded(
        # Payment intent id when there is one; zero-amount sessions have none
        external_reference=session.get('payment_intent') or session['id'],
        order_id=metadata.order_id,
        settled_amount=int(amount_total),
        settled_currency=str(session['currency']),
        checkout_session_id=session.get('id'),
        customer_email=customer_details.get('email') or session.get('customer_email'),
    )


def event_to_signal(event_type: str, data_object: Mapping[str, Any]) -> Optional[PaymentSignal]:
    if event_type in SESSION_SUCCEEDED_EVENTS:
        return session_to_signal(data_object)

    if event_type in SESSION_FAILED_EVENTS:
        metadata = parse_metadata(data_object.get('metadata'))
        return PaymentFailed(
            order_id=metadata.order_id,
            checkout_session_id=data_object.get('id'),
            reason=event_type.rsplit('.', 1)[-1],
        )

    if event_type in INTENT_FAILED_EVENTS:
        metadata = parse_metadata(data_object.get('metadata'))
        last_error = data_object.get('last_payment_error') or {}
        return PaymentFailed(
            order_id=metadata.order_id,
            reason=last_error.get('code') or 'payment_failed',
            final=False,
        )

    return None
