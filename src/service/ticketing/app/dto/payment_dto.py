"""
Payment processor boundary records.

Webhook payloads are parsed by the gateway adapters into these typed signals;
nothing past the adapter sees a raw processor event.
"""

from typing import Optional, Union
from uuid import UUID

import attrs
from pydantic import BaseModel, ConfigDict, Field


CHECKOUT_METADATA_VERSION = 1


class CheckoutMetadata(BaseModel):
    """
    Metadata attached to a checkout session and echoed back by the processor.

    Versioned so a webhook for a session created by an older deployment is
    still understood after fields are added.
    """

    model_config = ConfigDict(extra='ignore', frozen=True)

    v: int = Field(default=CHECKOUT_METADATA_VERSION, ge=1, le=CHECKOUT_METADATA_VERSION)
    order_id: UUID
    event_id: int
    buyer_id: int
    promo_code_id: Optional[int] = None

    def to_processor_metadata(self) -> dict[str, str]:
        # Processors store metadata as flat string maps
        return {
            'v': str(self.v),
            'order_id': str(self.order_id),
            'event_id': str(self.event_id),
            'buyer_id': str(self.buyer_id),
            'promo_code_id': '' if self.promo_code_id is None else str(self.promo_code_id),
        }

    @classmethod
    def from_processor_metadata(cls, metadata: dict[str, str]) -> 'CheckoutMetadata':
        cleaned = {key: value for key, value in metadata.items() if value != ''}
        return cls.model_validate(cleaned)


@attrs.frozen
class CheckoutSession:
    session_id: str
    url: str


@attrs.frozen
class PaymentSucceeded:
    external_reference: str
    order_id: UUID
    settled_amount: int
    settled_currency: str
    checkout_session_id: Optional[str] = None
    customer_email: Optional[str] = None


@attrs.frozen
class PaymentFailed:
    """
    final=False is a declined attempt inside a still-open session; the buyer
    may retry, so the order stays pending.
    """

    order_id: UUID
    checkout_session_id: Optional[str] = None
    reason: str = 'payment_failed'
    final: bool = True


PaymentSignal = Union[PaymentSucceeded, PaymentFailed]


@attrs.frozen
class RefundReceipt:
    external_reference: str
    status: str
