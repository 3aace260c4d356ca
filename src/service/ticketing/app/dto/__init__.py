"""Application layer DTOs"""

from src.service.ticketing.app.dto.payment_dto import (
    CheckoutMetadata,
    CheckoutSession,
    PaymentFailed,
    PaymentSignal,
    PaymentSucceeded,
    RefundReceipt,
)
from src.service.ticketing.app.dto.ticketing_result import (
    CheckInResult,
    CheckoutResult,
    ConfirmPaymentResult,
    ConfirmPaymentStatus,
    EventDetail,
    PromoValidationResult,
    RefundResult,
    TicketView,
    TierDraft,
    TransferResult,
)

__all__ = [
    'CheckInResult',
    'CheckoutMetadata',
    'CheckoutResult',
    'CheckoutSession',
    'ConfirmPaymentResult',
    'ConfirmPaymentStatus',
    'EventDetail',
    'PaymentFailed',
    'PaymentSignal',
    'PaymentSucceeded',
    'PromoValidationResult',
    'RefundReceipt',
    'RefundResult',
    'TicketView',
    'TierDraft',
    'TransferResult',
]
