from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.app.dto.payment_dto import (
    CheckoutMetadata,
    CheckoutSession,
    PaymentSignal,
    RefundReceipt,
)
from src.service.ticketing.domain.value_object.price_quote import PriceQuote


class IPaymentGateway(ABC):
    """
    Port to the external payment processor.

    Implementations must apply a timeout to every remote call and translate
    processor failures into ExternalServiceError (RefundProcessorError for
    refunds).
    """

    # HTTP header the webhook signature arrives in
    signature_header: str = 'stripe-signature'

    @abstractmethod
    async def create_checkout_session(
        self,
        *,
        quote: PriceQuote,
        currency: str,
        event_title: str,
        customer_email: Optional[str],
        metadata: CheckoutMetadata,
    ) -> CheckoutSession:
        pass

    @abstractmethod
    async def refund(
        self, *, external_reference: str, amount: int, metadata: dict[str, str]
    ) -> RefundReceipt:
        """
        Request a reversal of `amount` minor units against a captured payment

        Raises:
            RefundProcessorError: processor rejected the refund or was unreachable
        """
        pass

    @abstractmethod
    def parse_webhook(self, *, payload: bytes, signature: Optional[str]) -> Optional[PaymentSignal]:
        """
        Verify the signature and translate the event

        Returns:
            A payment signal, or None for event types the core does not handle

        Raises:
            PaymentSignatureError: missing or invalid signature, malformed metadata
        """
        pass

    @abstractmethod
    async def retrieve_checkout_session(self, *, session_id: str) -> Optional[PaymentSignal]:
        """Current outcome of a session; None while the buyer has not paid yet"""
        pass
